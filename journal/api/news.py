"""News API."""

from fastapi import APIRouter

from journal.services.news import latest_news

router = APIRouter(prefix="/api/news", tags=["news"])


@router.get("")
def list_news():
    return latest_news()
