"""HTTP interface: routers, dependencies and error mapping."""
