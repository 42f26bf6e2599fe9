"""Minimal push streams used by adapters and services."""
import itertools
from typing import Callable, Dict, Generic, List, TypeVar

T = TypeVar("T")
U = TypeVar("U")

Observer = Callable[[T], None]


class Disposable:
    """Handle returned by a subscription; disposing stops delivery."""

    def __init__(self, dispose_action: Callable[[], None]):
        self._dispose_action = dispose_action
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self._dispose_action()


class DisposeBag:
    """Collects disposables so an owner can drop all its subscriptions at once."""

    def __init__(self):
        self._disposables: List[Disposable] = []

    def add(self, disposable: Disposable) -> Disposable:
        self._disposables.append(disposable)
        return disposable

    def dispose(self) -> None:
        disposables, self._disposables = self._disposables, []
        for disposable in disposables:
            disposable.dispose()


class Observable(Generic[T]):
    """A stream of values that observers subscribe to."""

    def __init__(self, subscribe: Callable[[Observer], Disposable]):
        self._subscribe = subscribe

    def subscribe(self, on_next: Observer) -> Disposable:
        return self._subscribe(on_next)

    def map(self, transform: Callable[[T], U]) -> "Observable[U]":
        return Observable(lambda on_next: self.subscribe(lambda value: on_next(transform(value))))


class PublishRelay(Generic[T]):
    """
    Live-only stream: observers see values accepted after they subscribed.

    Never completes and never errors.
    """

    def __init__(self):
        self._observers: Dict[int, Observer] = {}
        self._ids = itertools.count()

    @property
    def has_observers(self) -> bool:
        return bool(self._observers)

    def accept(self, value: T) -> None:
        for key, observer in list(self._observers.items()):
            # An observer disposed by an earlier one in this pass is skipped
            if key in self._observers:
                observer(value)

    def subscribe(self, on_next: Observer) -> Disposable:
        key = next(self._ids)
        self._observers[key] = on_next
        return Disposable(lambda: self._observers.pop(key, None))

    def as_observable(self) -> Observable[T]:
        return Observable(self.subscribe)


class BehaviorRelay(PublishRelay[T]):
    """Hot stream: holds a current value and replays it to each new observer."""

    def __init__(self, value: T):
        super().__init__()
        self._value = value

    @property
    def value(self) -> T:
        return self._value

    def accept(self, value: T) -> None:
        self._value = value
        super().accept(value)

    def subscribe(self, on_next: Observer) -> Disposable:
        disposable = super().subscribe(on_next)
        on_next(self._value)
        return disposable
