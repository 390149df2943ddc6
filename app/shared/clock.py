"""
Proveedor de identificadores y reloj.

Los registros usan UUID4 como id y timestamps UTC con precisión de milisegundos.
Dentro de un proceso el reloj nunca devuelve dos veces el mismo instante, de modo
que el orden por fecha de creación es estable (necesario para el borrado LIFO de
productos).
"""

import threading
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

_MILLISECOND = timedelta(milliseconds=1)


def new_id() -> str:
    """Generar identificador único"""
    return str(uuid.uuid4())


def utc_millis(value: datetime) -> datetime:
    """Normalizar a UTC truncando a milisegundos"""
    if value.tzinfo is None or value.utcoffset() is None:
        value = value.replace(tzinfo=timezone.utc)
    else:
        value = value.astimezone(timezone.utc)
    return value.replace(microsecond=value.microsecond // 1000 * 1000)


class Clock:
    """Reloj UTC monotónico (por proceso) con precisión de milisegundos"""

    def __init__(self):
        self._lock = threading.Lock()
        self._last: Optional[datetime] = None

    def now(self) -> datetime:
        current = utc_millis(datetime.now(timezone.utc))
        with self._lock:
            if self._last is not None and current <= self._last:
                current = self._last + _MILLISECOND
            self._last = current
            return current


class FixedClock(Clock):
    """Reloj determinista para tests: avanza `step` en cada lectura"""

    def __init__(self, start: datetime, step: timedelta = timedelta(seconds=1)):
        super().__init__()
        self._current = utc_millis(start)
        self._step = step

    def now(self) -> datetime:
        with self._lock:
            value = self._current
            self._current = self._current + self._step
            return value

    def set(self, value: datetime) -> None:
        with self._lock:
            self._current = utc_millis(value)
