"""Router for the Books feature."""
from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Request

from api.di.container import ApplicationContainer as DependencyContainer
from api.features.books.controller import BookController
from api.features.books.dtos import BookList
from api.shared.utils import cancel_on_disconnect

router = APIRouter()


@router.get("/{topic}", response_model=BookList)
@inject
async def get_books(
    topic: str,
    http_request: Request,
    controller: BookController = Depends(
        Provide[DependencyContainer.controllers.book_controller]
    ),
):
    """Recommend five popular books on ``topic``."""
    return await cancel_on_disconnect(http_request, controller.get_books(topic))
