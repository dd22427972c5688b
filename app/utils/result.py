"""
Result type - success/failure container used by repositories and services
instead of exceptions for expected failures.

    result = repo.find_by_id(task_id)
    if result.is_err():
        return result          # short-circuit, nothing else runs
    task = result.value

Exceptions stay reserved for programmer errors (see UnwrapError).
"""
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar, Union

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")


class UnwrapError(RuntimeError):
    """unwrap() on Err / unwrap_err() on Ok - a bug in the caller"""


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_err(self):
        raise UnwrapError(f"unwrap_err() called on Ok({self.value!r})")

    def map(self, fn: Callable[[T], U]) -> "Ok[U]":
        return Ok(fn(self.value))

    def and_then(self, fn: Callable[[T], "Result[U, E]"]) -> "Result[U, E]":
        return fn(self.value)


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self):
        raise UnwrapError(f"unwrap() called on Err({self.error!r})")

    def unwrap_err(self) -> E:
        return self.error

    def map(self, fn) -> "Err[E]":
        return self

    def and_then(self, fn) -> "Err[E]":
        return self


Result = Union[Ok[T], Err[E]]
