"""
Centralized settings and discount policy configuration.
"""
import json
from pathlib import Path
from dataclasses import dataclass, field, fields
from typing import Optional


def get_project_root() -> Path:
    """Get the project root directory (where pyproject.toml lives)."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists():
            return parent
    # Fallback to 3 levels up from this file
    return Path(__file__).resolve().parent.parent.parent.parent


def get_data_dir() -> Path:
    """Directory holding the bundled catalog CSVs and policy file."""
    return Path(__file__).resolve().parent.parent / 'data'


@dataclass(frozen=True)
class DiscountPolicy:
    """Discount rules the engine applies. Immutable for the life of a calculation."""

    # Allow-lists by service name
    vip_services: tuple = ('VIP Vascular Cleanse', 'VIP White Jade')
    birthday_services: tuple = ('Premium Recovery', 'Premium Immunity')
    package10_services: tuple = ('Chelation', 'Premium Chelation')

    # Customer class rates
    vip_rate: float = 1.0
    birthday_rate: float = 0.5
    employee_rate: float = 0.5
    birthday_annual_cap: int = 8

    # Flat package discount when the service has no override price for the tier
    package_rates: dict = field(default_factory=lambda: {
        'package4': 0.10,
        'package8': 0.20,
        'package10': 0.25,
    })

    # Combined discount / nominal single-unit price at which a warning is raised
    high_discount_threshold: float = 0.70

    # When a tier override price exists, the override is used as the original
    # price AND the package discount is subtracted from it again.
    double_apply_override_discount: bool = True

    @classmethod
    def from_dict(cls, data: dict) -> 'DiscountPolicy':
        """Build a policy from a (possibly partial) dict, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in data.items():
            if key not in known:
                continue
            if key.endswith('_services'):
                value = tuple(value)
            values[key] = value
        if 'package_rates' in values:
            merged = cls().package_rates
            merged.update({k: float(v) for k, v in values['package_rates'].items()})
            values['package_rates'] = merged
        return cls(**values)

    @classmethod
    def from_json(cls, path: Path) -> 'DiscountPolicy':
        """Load policy overrides from a JSON file."""
        with open(path, 'r', encoding='utf-8') as f:
            return cls.from_dict(json.load(f))


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Project paths
    project_root: Path

    # Catalog files
    services_csv: Path
    customers_csv: Path

    # Policy file (optional)
    policy_json: Optional[Path] = None

    policy: DiscountPolicy = field(default_factory=DiscountPolicy)

    @classmethod
    def load(cls, project_root: Optional[Path] = None, data_dir: Optional[Path] = None) -> 'Settings':
        """Load settings from the project structure."""
        root = project_root or get_project_root()
        data = data_dir or get_data_dir()

        policy_path = data / 'discount_policy.json'
        if policy_path.exists():
            policy = DiscountPolicy.from_json(policy_path)
        else:
            policy_path = None
            policy = DiscountPolicy()

        return cls(
            project_root=root,
            services_csv=data / 'services.csv',
            customers_csv=data / 'customers.csv',
            policy_json=policy_path,
            policy=policy,
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings
