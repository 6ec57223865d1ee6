"""
API dependencies for dependency injection.
"""
from fastapi import Request

from review_collector.services.review_service import ReviewService


def get_review_service(request: Request) -> ReviewService:
    """
    Dependency for the application-wide review service.

    The service is built in the lifespan handler and kept on app.state.

    Usage:
        @router.get("/endpoint")
        async def endpoint(service: ReviewService = Depends(get_review_service)):
            ...
    """
    return request.app.state.review_service
