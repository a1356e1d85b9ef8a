"""Pytest configuration and shared fixtures."""

import logging

import pytest
from PIL import Image

from tests.fakes import FakeCodec


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers installed by setup_logging so they never outlive a test."""
    yield
    logger = logging.getLogger("heic_batch")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def sample_config():
    """Provide a sample configuration for testing."""
    from heic_batch.models import Config

    return Config(
        output_format="png",
        quality=90,
        output_path=None,
        delete_original=False,
        verbose=False,
        parallel_workers=2,
    )


@pytest.fixture
def test_logger():
    """Logger under the package namespace so caplog sees worker output."""
    logger = logging.getLogger("heic_batch.tests")
    logger.setLevel(logging.DEBUG)
    return logger


@pytest.fixture
def fake_codec():
    """A codec that decodes PNG bytes disguised as HEIC files."""
    return FakeCodec()


@pytest.fixture
def fake_worker(fake_codec, test_logger):
    """ConversionWorker wired to the fake codec."""
    from heic_batch.converter import ConversionWorker

    return ConversionWorker(codec=fake_codec, logger=test_logger)


@pytest.fixture
def real_heic_file(tmp_path):
    """Write a genuine HEIC file with pillow-heif, or skip if it cannot encode."""
    pillow_heif = pytest.importorskip("pillow_heif")

    def _make(name="photo.heic", size=(64, 48), color=(30, 160, 90)):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        try:
            heif_file = pillow_heif.from_pillow(Image.new("RGB", size, color=color))
            heif_file.save(path, quality=90)
        except Exception as e:
            pytest.skip(f"pillow-heif cannot encode HEIC here: {e}")
        return path

    return _make
