from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Sequence, TypeVar
from uuid import UUID

from fastapi import FastAPI, Query, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from returns.result import Result, Success

from bookstore.core.domain.model.book import Book
from bookstore.core.domain.model.errors import (
    BookNotFound,
    BookstoreError,
    DuplicateIsbn,
    InsufficientStock,
    InvalidArgument,
    InvalidDiscountCode,
    InvalidPurchaseState,
    PurchaseNotFound,
)
from bookstore.core.domain.model.purchase import Purchase, PurchaseStatus
from bookstore.core.ports.inbound.catalog import (
    CatalogUseCase,
    CreateBookCommand,
    UpdateBookCommand,
)
from bookstore.core.ports.inbound.purchases import (
    CreatePurchaseCommand,
    PurchaseLine,
    PurchaseQueryUseCase,
    PurchaseStatistics,
    PurchaseUseCase,
)

T = TypeVar("T")

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"

# ---- HTTP DTOs (adapter layer) ---------------------------------------------


class CreateBookRequest(BaseModel):
    isbn: str = Field(min_length=1, examples=["9780132350884"])
    title: str = Field(min_length=1, max_length=255, examples=["Clean Code"])
    author: str = Field(min_length=1, max_length=255, examples=["Robert C. Martin"])
    price: Decimal = Field(ge=0, examples=["39.99"])
    quantity: int = Field(0, ge=0, examples=[25])
    publisher: str | None = Field(None, max_length=255)
    publication_year: int | None = Field(None, ge=1450, le=2100)
    genre: str | None = Field(None, max_length=100)
    description: str | None = Field(None, max_length=2000)


class UpdateBookRequest(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=255)
    author: str | None = Field(None, min_length=1, max_length=255)
    price: Decimal | None = Field(None, ge=0)
    quantity: int | None = Field(None, ge=0)
    publisher: str | None = Field(None, max_length=255)
    publication_year: int | None = Field(None, ge=1450, le=2100)
    genre: str | None = Field(None, max_length=100)
    description: str | None = Field(None, max_length=2000)


class StockUpdateRequest(BaseModel):
    quantity: int = Field(ge=0, examples=[10])


class BookOut(BaseModel):
    id: str
    isbn: str
    title: str
    author: str
    price: str
    currency: str
    quantity: int
    available: bool
    publisher: str | None = None
    publication_year: int | None = None
    genre: str | None = None
    description: str | None = None
    created_at: datetime
    updated_at: datetime


class PurchaseItemIn(BaseModel):
    book_id: UUID
    quantity: int = Field(gt=0, examples=[2])


class PurchaseRequest(BaseModel):
    customer_name: str = Field(min_length=1, examples=["Jana Novak"])
    customer_email: str = Field(min_length=3, examples=["jana@example.com"])
    shipping_address: str = Field(min_length=1, examples=["Ilkovicova 2, Bratislava"])
    items: list[PurchaseItemIn] = Field(min_length=1)
    discount_code: str | None = Field(None, examples=["SAVE10"])


class StatusUpdateRequest(BaseModel):
    status: PurchaseStatus


class DiscountRequest(BaseModel):
    discount_code: str = Field(min_length=1, examples=["SAVE20"])


class PurchaseItemOut(BaseModel):
    book_id: str
    book_title: str
    book_author: str
    book_isbn: str
    quantity: int
    unit_price: str
    subtotal: str


class PurchaseOut(BaseModel):
    id: str
    order_number: str
    customer_name: str
    customer_email: str
    shipping_address: str
    items: list[PurchaseItemOut]
    subtotal: str
    discount_code: str | None
    discount_amount: str
    total_amount: str
    total_items: int
    currency: str
    status: PurchaseStatus
    purchase_date: datetime


class PurchaseStatisticsOut(BaseModel):
    total_purchases: int
    pending_purchases: int
    confirmed_purchases: int
    cancelled_purchases: int
    total_revenue: str
    currency: str


class ErrorResponse(BaseModel):
    type: str
    code: str
    message: str
    details: dict[str, Any] | list[dict[str, Any]] | None = None


# ---- Mapping helpers -------------------------------------------------------


def _book_out(book: Book) -> BookOut:
    return BookOut(
        id=str(book.id),
        isbn=book.isbn,
        title=book.title,
        author=book.author,
        price=str(book.price.amount),
        currency=book.price.currency,
        quantity=book.quantity,
        available=book.is_available(),
        publisher=book.publisher,
        publication_year=book.publication_year,
        genre=book.genre,
        description=book.description,
        created_at=book.metadata.created_at,
        updated_at=book.metadata.updated_at,
    )


def _purchase_out(p: Purchase) -> PurchaseOut:
    return PurchaseOut(
        id=str(p.id),
        order_number=p.order_number,
        customer_name=p.customer_name,
        customer_email=p.customer_email,
        shipping_address=p.shipping_address,
        items=[
            PurchaseItemOut(
                book_id=str(it.book_id),
                book_title=it.book_title,
                book_author=it.book_author,
                book_isbn=it.book_isbn,
                quantity=it.quantity,
                unit_price=str(it.unit_price.amount),
                subtotal=str(it.subtotal.amount),
            )
            for it in p.items
        ],
        subtotal=str(p.subtotal.amount),
        discount_code=p.discount_code,
        discount_amount=str(p.discount_amount.amount),
        total_amount=str(p.total_amount.amount),
        total_items=p.total_items,
        currency=p.currency,
        status=p.status,
        purchase_date=p.purchase_date,
    )


def _statistics_out(s: PurchaseStatistics) -> PurchaseStatisticsOut:
    return PurchaseStatisticsOut(
        total_purchases=s.total_purchases,
        pending_purchases=s.pending_purchases,
        confirmed_purchases=s.confirmed_purchases,
        cancelled_purchases=s.cancelled_purchases,
        total_revenue=str(s.total_revenue.amount),
        currency=s.total_revenue.currency,
    )


def _error_details(err: BookstoreError) -> dict[str, Any] | None:
    if isinstance(err, InsufficientStock):
        return {"isbn": err.isbn, "requested": err.requested, "available": err.available}
    if isinstance(err, InvalidPurchaseState):
        return {"current": err.current, "requested": err.requested}
    if isinstance(err, (BookNotFound, PurchaseNotFound)):
        return {"identifier": err.identifier}
    if isinstance(err, DuplicateIsbn):
        return {"isbn": err.isbn}
    if isinstance(err, InvalidDiscountCode):
        return {"discount_code": err.discount_code}
    return None


def _map_error_to_http(err: BookstoreError) -> tuple[int, ErrorResponse]:
    if isinstance(err, (BookNotFound, PurchaseNotFound)):
        status = 404
    elif isinstance(err, (DuplicateIsbn, InsufficientStock, InvalidPurchaseState)):
        status = 409
    elif isinstance(err, (InvalidArgument, InvalidDiscountCode)):
        status = 400
    else:
        status = 500
    return status, ErrorResponse(
        type=type(err).__name__,
        code=err.code,
        message=str(err),
        details=_error_details(err),
    )


def _unwrap(result: Result[T, BookstoreError]) -> T:
    if isinstance(result, Success):
        return result.unwrap()
    raise result.failure()


# ---- App factory -----------------------------------------------------------


def create_app(
    catalog_uc: CatalogUseCase,
    purchase_uc: PurchaseUseCase,
    purchase_query_uc: PurchaseQueryUseCase,
    title: str = "bookstore",
) -> FastAPI:
    app = FastAPI(title=title)

    # --- exception handlers --------------------------------------------------

    @app.exception_handler(BookstoreError)
    async def handle_domain_error(_: Request, exc: BookstoreError) -> JSONResponse:
        status, body = _map_error_to_http(exc)
        logger.warning("%s: %s", exc.code, exc)
        return JSONResponse(status_code=status, content=body.model_dump())

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        _: Request, exc: RequestValidationError
    ) -> JSONResponse:
        body = ErrorResponse(
            type="RequestValidationError",
            code="VALIDATION_ERROR",
            message="invalid request",
            details=[
                {"loc": list(e.get("loc", ())), "msg": e.get("msg", "")}
                for e in exc.errors()
            ],
        )
        return JSONResponse(status_code=400, content=body.model_dump())

    @app.exception_handler(Exception)
    async def handle_unexpected(_: Request, exc: Exception) -> JSONResponse:
        logger.exception("unexpected error")
        body = ErrorResponse(
            type=type(exc).__name__,
            code="INTERNAL_ERROR",
            message="internal server error",
        )
        return JSONResponse(status_code=500, content=body.model_dump())

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    # --- books ---------------------------------------------------------------
    # static paths are registered before /books/{book_id}

    def books_out(result: Result[Sequence[Book], BookstoreError]) -> list[BookOut]:
        return [_book_out(b) for b in _unwrap(result)]

    @app.post(f"{API_PREFIX}/books", response_model=BookOut, status_code=201)
    def create_book(req: CreateBookRequest, response: Response) -> Any:
        book = _unwrap(catalog_uc.create_book(CreateBookCommand(**req.model_dump())))
        response.headers["Location"] = f"{API_PREFIX}/books/{book.id}"
        return _book_out(book)

    @app.get(f"{API_PREFIX}/books", response_model=list[BookOut])
    def list_books() -> Any:
        return books_out(catalog_uc.list_books())

    @app.get(f"{API_PREFIX}/books/available", response_model=list[BookOut])
    def list_available_books() -> Any:
        return books_out(catalog_uc.list_available_books())

    @app.get(f"{API_PREFIX}/books/search/author", response_model=list[BookOut])
    def find_by_author(author: str = Query(min_length=1)) -> Any:
        return books_out(catalog_uc.find_books_by_author(author))

    @app.get(f"{API_PREFIX}/books/search/title", response_model=list[BookOut])
    def find_by_title(title: str = Query(min_length=1)) -> Any:
        return books_out(catalog_uc.find_books_by_title(title))

    @app.get(f"{API_PREFIX}/books/search/genre", response_model=list[BookOut])
    def find_by_genre(genre: str = Query(min_length=1)) -> Any:
        return books_out(catalog_uc.find_books_by_genre(genre))

    @app.get(f"{API_PREFIX}/books/search/price", response_model=list[BookOut])
    def find_by_price_range(
        min_price: Decimal = Query(ge=0), max_price: Decimal = Query(ge=0)
    ) -> Any:
        return books_out(catalog_uc.find_books_by_price_range(min_price, max_price))

    @app.get(f"{API_PREFIX}/books/search", response_model=list[BookOut])
    def search_books(q: str = Query(min_length=1)) -> Any:
        return books_out(catalog_uc.search_books(q))

    @app.get(f"{API_PREFIX}/books/isbn/{{isbn}}", response_model=BookOut)
    def get_book_by_isbn(isbn: str) -> Any:
        return _book_out(_unwrap(catalog_uc.get_book_by_isbn(isbn)))

    @app.get(f"{API_PREFIX}/books/{{book_id}}", response_model=BookOut)
    def get_book(book_id: UUID) -> Any:
        return _book_out(_unwrap(catalog_uc.get_book_by_id(book_id)))

    @app.put(f"{API_PREFIX}/books/{{book_id}}", response_model=BookOut)
    def update_book(book_id: UUID, req: UpdateBookRequest) -> Any:
        cmd = UpdateBookCommand(**req.model_dump())
        return _book_out(_unwrap(catalog_uc.update_book(book_id, cmd)))

    @app.delete(f"{API_PREFIX}/books/{{book_id}}", status_code=204)
    def delete_book(book_id: UUID) -> Response:
        _unwrap(catalog_uc.delete_book(book_id))
        return Response(status_code=204)

    @app.patch(f"{API_PREFIX}/books/{{book_id}}/stock", response_model=BookOut)
    def update_stock(book_id: UUID, req: StockUpdateRequest) -> Any:
        return _book_out(_unwrap(catalog_uc.update_stock(book_id, req.quantity)))

    # --- purchases -----------------------------------------------------------

    def purchases_out(
        result: Result[Sequence[Purchase], BookstoreError],
    ) -> list[PurchaseOut]:
        return [_purchase_out(p) for p in _unwrap(result)]

    @app.post(f"{API_PREFIX}/purchases", response_model=PurchaseOut, status_code=201)
    def create_purchase(req: PurchaseRequest, response: Response) -> Any:
        cmd = CreatePurchaseCommand(
            customer_name=req.customer_name,
            customer_email=req.customer_email,
            shipping_address=req.shipping_address,
            lines=tuple(
                PurchaseLine(book_id=it.book_id, quantity=it.quantity)
                for it in req.items
            ),
            discount_code=req.discount_code,
        )
        purchase = _unwrap(purchase_uc.create_purchase(cmd))
        response.headers["Location"] = f"{API_PREFIX}/purchases/{purchase.id}"
        return _purchase_out(purchase)

    @app.get(f"{API_PREFIX}/purchases", response_model=list[PurchaseOut])
    def list_purchases() -> Any:
        return purchases_out(purchase_query_uc.list_purchases())

    @app.get(
        f"{API_PREFIX}/purchases/statistics", response_model=PurchaseStatisticsOut
    )
    def purchase_statistics() -> Any:
        return _statistics_out(_unwrap(purchase_query_uc.get_purchase_statistics()))

    @app.get(f"{API_PREFIX}/purchases/customer", response_model=list[PurchaseOut])
    def purchases_by_customer(email: str = Query(min_length=1)) -> Any:
        return purchases_out(purchase_query_uc.get_purchases_by_customer_email(email))

    @app.get(
        f"{API_PREFIX}/purchases/status/{{status}}", response_model=list[PurchaseOut]
    )
    def purchases_by_status(status: PurchaseStatus) -> Any:
        return purchases_out(purchase_query_uc.get_purchases_by_status(status))

    @app.get(
        f"{API_PREFIX}/purchases/order/{{order_number}}", response_model=PurchaseOut
    )
    def purchase_by_order_number(order_number: str) -> Any:
        return _purchase_out(
            _unwrap(purchase_query_uc.get_purchase_by_order_number(order_number))
        )

    @app.get(f"{API_PREFIX}/purchases/{{purchase_id}}", response_model=PurchaseOut)
    def get_purchase(purchase_id: UUID) -> Any:
        return _purchase_out(_unwrap(purchase_query_uc.get_purchase_by_id(purchase_id)))

    @app.post(
        f"{API_PREFIX}/purchases/{{purchase_id}}/confirm", response_model=PurchaseOut
    )
    def confirm_purchase(purchase_id: UUID) -> Any:
        return _purchase_out(_unwrap(purchase_uc.confirm_purchase(purchase_id)))

    @app.post(
        f"{API_PREFIX}/purchases/{{purchase_id}}/cancel", response_model=PurchaseOut
    )
    def cancel_purchase(purchase_id: UUID) -> Any:
        return _purchase_out(_unwrap(purchase_uc.cancel_purchase(purchase_id)))

    @app.patch(
        f"{API_PREFIX}/purchases/{{purchase_id}}/status", response_model=PurchaseOut
    )
    def update_purchase_status(purchase_id: UUID, req: StatusUpdateRequest) -> Any:
        return _purchase_out(
            _unwrap(purchase_uc.update_purchase_status(purchase_id, req.status))
        )

    @app.post(
        f"{API_PREFIX}/purchases/{{purchase_id}}/discount", response_model=PurchaseOut
    )
    def apply_discount(purchase_id: UUID, req: DiscountRequest) -> Any:
        return _purchase_out(
            _unwrap(purchase_uc.apply_discount_code(purchase_id, req.discount_code))
        )

    return app
