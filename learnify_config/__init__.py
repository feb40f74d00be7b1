# learnify_config package: authoritative source for all Learnify client configuration.
#
# Sub-modules:
#   api_config.py       : base URL, endpoint table, leaderboard paging defaults
#   transport_config.py : per-environment timeouts, cache policy, connection limits
