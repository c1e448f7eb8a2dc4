"""HTTP interface: FastAPI application factory and routers."""
