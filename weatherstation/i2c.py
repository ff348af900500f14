"""I2C bus abstraction shared by the sensor and display drivers."""

from __future__ import annotations

import os
from abc import ABC, abstractmethod

_I2C_SLAVE = 0x0703


class I2CError(OSError):
    """Raised when a transfer on the I2C bus fails."""


class I2CBus(ABC):
    """A bus that can address 7-bit devices with raw write and read transfers."""

    @abstractmethod
    def write(self, address: int, data: bytes, nostop: bool = False) -> int:
        """Write ``data`` to the device at ``address``; return the bytes written."""

    @abstractmethod
    def read(self, address: int, length: int, nostop: bool = False) -> bytes:
        """Read ``length`` bytes from the device at ``address``."""


class LinuxI2CBus(I2CBus):
    """An I2C adapter exposed by the Linux i2c-dev interface.

    ``bus_number`` selects ``/dev/i2c-<n>``; a string is taken as a device path.
    The plain i2c-dev interface ends every transfer with a stop condition, so
    ``nostop`` is accepted but has no effect here.
    """

    def __init__(self, bus_number: int | str) -> None:
        if isinstance(bus_number, str):
            self.path = bus_number
        else:
            self.path = f"/dev/i2c-{bus_number}"
        try:
            self._fd: int | None = os.open(self.path, os.O_RDWR)
        except OSError as exc:
            raise I2CError(exc.errno, f"cannot open {self.path}: {exc.strerror}") from exc

    def _select(self, address: int) -> int:
        if self._fd is None:
            raise I2CError(f"bus {self.path} is closed")
        try:
            import fcntl
        except ImportError as exc:
            raise I2CError("i2c-dev is not available on this platform") from exc
        try:
            fcntl.ioctl(self._fd, _I2C_SLAVE, address)
        except OSError as exc:
            raise I2CError(exc.errno, f"cannot address device 0x{address:02X}: {exc.strerror}") from exc
        return self._fd

    def write(self, address: int, data: bytes, nostop: bool = False) -> int:
        fd = self._select(address)
        try:
            return os.write(fd, bytes(data))
        except OSError as exc:
            raise I2CError(exc.errno, f"write to 0x{address:02X} failed: {exc.strerror}") from exc

    def read(self, address: int, length: int, nostop: bool = False) -> bytes:
        fd = self._select(address)
        try:
            return os.read(fd, length)
        except OSError as exc:
            raise I2CError(exc.errno, f"read from 0x{address:02X} failed: {exc.strerror}") from exc

    def close(self) -> None:
        """Release the device file; closing twice is harmless."""
        if self._fd is not None:
            os.close(self._fd)
            self._fd = None

    def __enter__(self) -> LinuxI2CBus:
        return self

    def __exit__(self, *args) -> None:
        self.close()