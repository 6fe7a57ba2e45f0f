"""Tests for bookstore.core.domain.model.book."""

import random

from returns.result import Failure, Success

from bookstore.core.domain.model.common import Money
from bookstore.core.domain.model.errors import InsufficientStock, InvalidArgument

from conftest import new_book


class TestStockQueries:
    def test_has_stock(self):
        book = new_book(quantity=3)
        assert book.has_stock(3) is True
        assert book.has_stock(4) is False
        assert book.has_stock(0) is True

    def test_is_available(self):
        assert new_book(quantity=1).is_available() is True
        assert new_book(quantity=0).is_available() is False


class TestReduceQuantity:
    def test_reduces(self):
        book = new_book(quantity=5)
        result = book.reduce_quantity(2)
        assert isinstance(result, Success)
        assert result.unwrap().quantity == 3

    def test_to_zero(self):
        assert new_book(quantity=5).reduce_quantity(5).unwrap().quantity == 0

    def test_insufficient_stock_leaves_book_unchanged(self):
        book = new_book(isbn="978-1", quantity=2)
        result = book.reduce_quantity(3)
        assert isinstance(result, Failure)
        err = result.failure()
        assert isinstance(err, InsufficientStock)
        assert (err.isbn, err.requested, err.available) == ("978-1", 3, 2)
        assert book.quantity == 2

    def test_negative_amount_rejected(self):
        result = new_book().reduce_quantity(-1)
        assert isinstance(result.failure(), InvalidArgument)

    def test_keeps_identity(self):
        book = new_book()
        assert book.reduce_quantity(1).unwrap().id == book.id


class TestAddQuantity:
    def test_adds(self):
        assert new_book(quantity=1).add_quantity(4).unwrap().quantity == 5

    def test_negative_amount_rejected(self):
        book = new_book(quantity=1)
        result = book.add_quantity(-1)
        assert isinstance(result.failure(), InvalidArgument)
        assert book.quantity == 1


class TestWithQuantityAndRevise:
    def test_with_quantity(self):
        assert new_book(quantity=1).with_quantity(7).unwrap().quantity == 7

    def test_with_negative_quantity(self):
        assert isinstance(new_book().with_quantity(-2).failure(), InvalidArgument)

    def test_revise_changes_only_given_fields(self):
        book = new_book(title="Old", author="Someone")
        revised = book.revise(title="New", price=Money.of("12.50")).unwrap()
        assert revised.title == "New"
        assert revised.author == "Someone"
        assert revised.price == Money.of("12.50")
        assert revised.metadata.created_at == book.metadata.created_at

    def test_revise_rejects_unknown_fields(self):
        assert isinstance(new_book().revise(isbn="x").failure(), InvalidArgument)

    def test_revise_rejects_negative_price(self):
        result = new_book().revise(price=Money.of("-1"))
        assert isinstance(result.failure(), InvalidArgument)


class TestStockNeverNegative:
    def test_random_operation_sequences(self):
        rng = random.Random(20240601)
        for _ in range(50):
            book = new_book(quantity=rng.randint(0, 10))
            for _ in range(40):
                amount = rng.randint(0, 8)
                before = book.quantity
                if rng.random() < 0.6:
                    result = book.reduce_quantity(amount)
                else:
                    result = book.add_quantity(amount)
                if isinstance(result, Success):
                    book = result.unwrap()
                else:
                    assert book.quantity == before
                assert book.quantity >= 0
