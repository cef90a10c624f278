"""Share-pool AMM: pricing, quotes, trade execution and market lifecycle."""
