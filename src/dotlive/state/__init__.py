"""Address-bar state: history channel, share links, and startup resolution."""
