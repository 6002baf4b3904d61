import pytest

from arcoating.materials import MaterialCatalog
from arcoating.thin_film import TransferMatrixEngine


@pytest.fixture
def catalog():
    return MaterialCatalog.standard()


@pytest.fixture
def engine(catalog):
    return TransferMatrixEngine(catalog)
