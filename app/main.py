from dotenv import load_dotenv

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .users import routers as users_router
from .conversations import routers as conversations_router
from .messages import routers as messages_router
from .reactions import routers as reactions_router
from .typing_state import routers as typing_router
from .unread import routers as unread_router

from .core.middleware import logging_middleware
from .utils.env_helper import env_list
from .utils.logging_config import setup_logging

load_dotenv()
setup_logging()

app = FastAPI(title="Chat API")
app.include_router(users_router.router, prefix="/users", tags=["Users"])
app.include_router(
    conversations_router.router, prefix="/conversations", tags=["Conversations"]
)
app.include_router(messages_router.router, prefix="/messages", tags=["Messages"])
app.include_router(reactions_router.router, prefix="/reactions", tags=["Reactions"])
app.include_router(typing_router.router, prefix="/typing", tags=["Typing"])
app.include_router(unread_router.router, prefix="/unread", tags=["Unread"])


origins = env_list(
    "CORS_ORIGINS",
    [
        "http://localhost:3000",
        "http://localhost:5173",
    ],
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.middleware("http")(logging_middleware)


@app.get("/health")
def health():
    return {"status": "ok"}

