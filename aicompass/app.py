from contextlib import asynccontextmanager

from fastapi import FastAPI

from aicompass.config import get_config
from aicompass.dbutils import init_engine
from aicompass.router.api import routers


@asynccontextmanager
async def lifespan(app: FastAPI):
    config = get_config()
    async with init_engine(config):
        yield


app = FastAPI(title="AI Compass", lifespan=lifespan)


@app.get("/")
async def hello():
    return {"message": "AI Compass"}


for router in routers:
    app.include_router(router)
