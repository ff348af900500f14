import pytest

from weatherstation.i2c import I2CBus, I2CError, LinuxI2CBus


def test_abstract_bus_cannot_be_instantiated():
    with pytest.raises(TypeError):
        I2CBus()


def test_missing_bus_raises_i2c_error():
    with pytest.raises(I2CError):
        LinuxI2CBus(987654)


def test_i2c_error_is_an_os_error():
    with pytest.raises(OSError):
        LinuxI2CBus(987654)


def test_write_on_non_i2c_device_raises(tmp_path):
    device = tmp_path / "device"
    device.write_bytes(b"")
    with LinuxI2CBus(str(device)) as bus:
        with pytest.raises(I2CError):
            bus.write(0x38, b"\x00")


def test_read_on_non_i2c_device_raises(tmp_path):
    device = tmp_path / "device"
    device.write_bytes(b"")
    with LinuxI2CBus(str(device)) as bus:
        with pytest.raises(I2CError):
            bus.read(0x38, 1)


def test_closed_bus_rejects_transfers(tmp_path):
    device = tmp_path / "device"
    device.write_bytes(b"")
    with LinuxI2CBus(str(device)) as bus:
        pass
    bus.close()
    with pytest.raises(I2CError, match="closed"):
        bus.write(0x38, b"\x00")
    with pytest.raises(I2CError, match="closed"):
        bus.read(0x38, 1)


def test_device_path_is_derived_from_bus_number(tmp_path):
    device = tmp_path / "device"
    device.write_bytes(b"")
    with LinuxI2CBus(str(device)) as bus:
        assert bus.path == str(device)