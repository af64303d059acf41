"""
Tests for the CSV-backed catalog lookup.
"""
import pytest

from clinic_pricing.config.settings import Settings, get_data_dir
from clinic_pricing.engine import DiscountClass
from clinic_pricing.exceptions import CatalogError
from clinic_pricing.services.catalog_service import ServiceCatalog


@pytest.fixture
def catalog_files(tmp_path):
    services = tmp_path / "services.csv"
    services.write_text(
        "id,name,category,base_price,duration,package4_price,package8_price,package10_price,"
        "allow_white_jade,allow_white_jade_double,allow_thymus,allow_power_shot\n"
        "S1, Premium Recovery ,IMMUNE_RECOVERY,120000,50,400000,,,true,false,TRUE,\n"
        "S2,Gut Restore,,50000,,,,,,,,\n"
        "S1,Duplicate Row,OTHER,1,1,,,,,,,\n",
        encoding="utf-8",
    )
    customers = tmp_path / "customers.csv"
    customers.write_text(
        "id,name,discount_class,birthday_usage_year,birthday_usage_count\n"
        "C1,Park Seoyeon,BIRTHDAY,2026,3\n"
        "C2,,,,\n",
        encoding="utf-8",
    )
    return services, customers


@pytest.fixture
def catalog(tmp_path, catalog_files):
    services, customers = catalog_files
    settings = Settings.load(project_root=tmp_path, data_dir=tmp_path)
    return ServiceCatalog(settings, services, customers)


def test_service_fields_are_parsed(catalog):
    service = catalog.get_service("S1")
    assert service.name == "Premium Recovery"
    assert service.base_price == 120000
    assert service.package4_price == 400000
    assert service.package8_price is None
    assert service.allow_white_jade is True
    assert service.allow_thymus is True
    assert service.allow_power_shot is False


def test_blank_optional_fields_default(catalog):
    service = catalog.get_service("S2")
    assert service.category == "OTHER"
    assert service.duration == 0


def test_duplicate_ids_keep_first_row(catalog):
    assert len(catalog.list_services()) == 2


def test_customer_fields_are_parsed(catalog):
    customer = catalog.get_customer("C1")
    assert customer.discount_class == DiscountClass.BIRTHDAY
    assert customer.birthday_usage_year == 2026
    assert customer.birthday_usage_count == 3

    blank = catalog.get_customer("C2")
    assert blank.discount_class == DiscountClass.REGULAR
    assert blank.birthday_usage_year is None
    assert blank.birthday_usage_count == 0


def test_unknown_ids_raise(catalog):
    with pytest.raises(CatalogError):
        catalog.get_service("missing")
    with pytest.raises(CatalogError):
        catalog.get_customer("missing")


def test_missing_file_raises(tmp_path):
    settings = Settings.load(project_root=tmp_path, data_dir=tmp_path)
    with pytest.raises(FileNotFoundError):
        ServiceCatalog(settings)


def test_bundled_catalog_loads():
    catalog = ServiceCatalog(Settings.load(data_dir=get_data_dir()))
    names = [s.name for s in catalog.list_services()]
    assert "VIP Vascular Cleanse" in names
    assert catalog.get_customer("CUST-002").discount_class == DiscountClass.VIP


def test_non_numeric_cells_raise_catalog_error(tmp_path, catalog_files):
    services, customers = catalog_files
    services.write_text(
        "id,name,base_price,package4_price\n"
        "S1,Premium Recovery,120k,\n"
        "S2,Gut Restore,50000,four hundred\n",
        encoding="utf-8",
    )
    customers.write_text(
        "id,name,discount_class,birthday_usage_year,birthday_usage_count\n"
        "C1,Park Seoyeon,BIRTHDAY,2026,three\n",
        encoding="utf-8",
    )
    catalog = ServiceCatalog(Settings.load(project_root=tmp_path, data_dir=tmp_path), services, customers)

    with pytest.raises(CatalogError, match="S1 base_price"):
        catalog.get_service("S1")
    with pytest.raises(CatalogError, match="S2 package4_price"):
        catalog.get_service("S2")
    with pytest.raises(CatalogError, match="C1 birthday_usage_count"):
        catalog.get_customer("C1")
