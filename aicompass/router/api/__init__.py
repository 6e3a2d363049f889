from aicompass.router.api import classify, config
from aicompass.router.api.v1 import conversation

routers = [
    classify.router,
    config.router,
    conversation.router,
]
