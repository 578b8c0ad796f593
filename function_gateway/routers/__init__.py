"""HTTP routers mounted by the gateway app."""
