from qv_node.whitelist.client import OpenWhitelist, StaticWhitelist, WhitelistCache, build_whitelist

__all__ = ["OpenWhitelist", "StaticWhitelist", "WhitelistCache", "build_whitelist"]
