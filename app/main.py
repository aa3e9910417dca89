from contextlib import asynccontextmanager
from fastapi import FastAPI

from app.core.logger import setup_logging
from app.middleware.route_guard import RouteGuardMiddleware
from app.routers import auth, health, lists
from app.services.domains import domain_names


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    yield


app = FastAPI(
    title="TSMWA Admin Dashboard",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(RouteGuardMiddleware)

app.include_router(auth.router)
app.include_router(health.router)
for surface_router in lists.routers:
    app.include_router(surface_router)


@app.get("/")
def home():
    return {
        "app": app.title,
        "surfaces": ["/admin", "/tsmwa", "/twwa"],
        "lists": list(domain_names()),
    }
