from fastapi import APIRouter

from polyfill_docs.api.docs.routes import router as docs_router

router = APIRouter()
router.include_router(docs_router)
