from fastapi import APIRouter

from app.api.routes import projects, prompts, state, templates, utils

api_router = APIRouter()
api_router.include_router(state.router, tags=["state"])
api_router.include_router(utils.router, tags=["utils"])
api_router.include_router(projects.router, prefix="/projects", tags=["projects"])
api_router.include_router(prompts.router, prefix="/prompts", tags=["prompts"])
api_router.include_router(templates.router, prefix="/templates", tags=["templates"])
