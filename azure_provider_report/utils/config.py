"""Configuration loading and management"""

import os
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from ..core.baseline import DEFAULT_BASELINE_CATALOG, BaselineCatalog
from ..core.models import ReportConfiguration
from ..utils.logger import setup_logger

DEFAULT_CONFIG_LOCATIONS = [
    "azure_provider_report.yml",
    "azure_provider_report.yaml",
    os.path.expanduser("~/.azure_provider_report.yml"),
    os.path.expanduser("~/.config/azure_provider_report/config.yml"),
]


class ConfigurationLoader:
    """Load and manage configuration from file, environment and CLI overrides"""

    def __init__(self):
        self.logger = setup_logger(self.__class__.__name__)

    def load_configuration(
        self,
        config_file: Optional[str] = None,
        **overrides
    ) -> ReportConfiguration:
        """Merge defaults, config file, environment variables and overrides, in that order"""

        config_dict = asdict(ReportConfiguration())

        if config_file:
            config_dict.update(self._load_from_file(config_file, required=True))
        else:
            config_dict.update(self._load_default_config())

        config_dict.update(self._load_from_environment())

        config_dict.update({k: v for k, v in overrides.items() if v is not None})

        known_keys = {f.name for f in fields(ReportConfiguration)}
        config = ReportConfiguration(**{k: v for k, v in config_dict.items() if k in known_keys})
        self._validate_configuration(config)
        return config

    def _load_from_file(self, config_file: str, required: bool = False) -> Dict[str, Any]:
        """Load configuration from a YAML file"""

        config_path = Path(config_file)
        if not config_path.exists():
            if required:
                raise ValueError(f"Configuration file not found: {config_file}")
            return {}

        if config_path.suffix.lower() not in ['.yml', '.yaml']:
            raise ValueError(f"Unsupported config file format: {config_path.suffix}")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {config_file}: {e}") from e

        if not isinstance(config_data, dict):
            raise ValueError(f"Configuration file {config_file} must contain a mapping")

        self.logger.info(f"Loaded configuration from: {config_file}")
        return self._normalize_file_config(config_data)

    def _load_default_config(self) -> Dict[str, Any]:
        """Try to load from default configuration locations"""

        for location in DEFAULT_CONFIG_LOCATIONS:
            if os.path.exists(location):
                return self._load_from_file(location)

        return {}

    def _normalize_file_config(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        """Map the sectioned file layout onto ReportConfiguration fields"""

        normalized: Dict[str, Any] = {}

        report_settings = self._section(config_data, 'report_settings')
        for key in ('output_dir', 'report_title'):
            if report_settings.get(key) is not None:
                normalized[key] = str(report_settings[key])
        for key in ('include_unregistered', 'export_json'):
            if report_settings.get(key) is not None:
                if not isinstance(report_settings[key], bool):
                    raise ValueError(f"report_settings.{key} must be true or false, got {report_settings[key]!r}")
                normalized[key] = report_settings[key]

        subscriptions = self._section(config_data, 'subscriptions')
        for key, field_name in (('include', 'subscription_ids'), ('exclude', 'excluded_subscription_ids')):
            if subscriptions.get(key) is not None:
                if not isinstance(subscriptions[key], list):
                    raise ValueError(f"subscriptions.{key} must be a list of subscription IDs")
                normalized[field_name] = [str(s) for s in subscriptions[key]]

        baseline = self._section(config_data, 'baseline')
        if baseline:
            normalized['baseline'] = baseline

        return normalized

    def _section(self, config_data: Dict[str, Any], name: str) -> Dict[str, Any]:
        """Top-level section of the config file, empty when absent"""
        section = config_data.get(name)
        if section is None:
            return {}
        if not isinstance(section, dict):
            raise ValueError(f"Configuration section '{name}' must be a mapping")
        return section

    def _load_from_environment(self) -> Dict[str, Any]:
        """Load configuration from environment variables"""

        env_config = {}

        env_mapping = {
            'AZURE_PROVIDER_REPORT_OUTPUT_DIR': ('output_dir', str),
            'AZURE_PROVIDER_REPORT_TITLE': ('report_title', str),
            'AZURE_PROVIDER_REPORT_INCLUDE_UNREGISTERED': ('include_unregistered', self._parse_bool),
            'AZURE_PROVIDER_REPORT_EXPORT_JSON': ('export_json', self._parse_bool),
            'AZURE_PROVIDER_REPORT_SUBSCRIPTION_IDS': ('subscription_ids', self._parse_list),
            'AZURE_PROVIDER_REPORT_EXCLUDED_SUBSCRIPTION_IDS': ('excluded_subscription_ids', self._parse_list),
        }

        for env_var, (config_key, parser) in env_mapping.items():
            value = os.getenv(env_var)
            if value is not None:
                env_config[config_key] = parser(value)
                self.logger.debug(f"Loaded {config_key} from environment: {value}")

        return env_config

    def _parse_list(self, value: str) -> List[str]:
        """Parse comma-separated string into list"""
        return [item.strip() for item in value.split(',') if item.strip()]

    def _parse_bool(self, value: str) -> bool:
        """Parse string into boolean"""
        return value.lower() in ('true', '1', 'yes', 'on', 'enabled')

    def _validate_configuration(self, config: ReportConfiguration) -> None:
        """Validate configuration values"""

        if not str(config.report_title).strip():
            raise ValueError("Report title must not be empty")

        if not str(config.output_dir).strip():
            raise ValueError("Output directory must not be empty")

        overlap = set(config.subscription_ids) & set(config.excluded_subscription_ids)
        if overlap:
            self.logger.warning(f"Subscriptions both included and excluded will be skipped: {', '.join(sorted(overlap))}")

        catalog = build_catalog(config)
        if not catalog.required:
            raise ValueError("Baseline 'required' provider list must not be empty")

        self.logger.debug("Configuration validation completed")

    def save_configuration(self, config: ReportConfiguration, output_file: str) -> None:
        """Save configuration to file in the sectioned layout"""

        nested_config = {
            'report_settings': {
                'output_dir': config.output_dir,
                'report_title': config.report_title,
                'include_unregistered': config.include_unregistered,
                'export_json': config.export_json,
            },
            'subscriptions': {
                'include': list(config.subscription_ids),
                'exclude': list(config.excluded_subscription_ids),
            },
            'baseline': build_catalog(config).to_dict(),
        }

        output_path = Path(output_file)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(nested_config, f, default_flow_style=False, indent=2, sort_keys=False)

        self.logger.info(f"Configuration saved to: {output_file}")


def build_catalog(config: ReportConfiguration) -> BaselineCatalog:
    """Default baseline catalog with the configured overrides applied"""
    return DEFAULT_BASELINE_CATALOG.with_overrides(config.baseline)


def create_sample_config(output_file: str = "azure_provider_report.yml") -> Path:
    """Create a sample configuration file"""

    sample_config = {
        'report_settings': {
            'output_dir': 'reports',
            'report_title': 'Azure Resource Provider Report',
            'include_unregistered': False,
            'export_json': False,
        },
        'subscriptions': {
            'include': [],
            'exclude': [],
        },
        'baseline': {
            'required': list(DEFAULT_BASELINE_CATALOG.required),
            'recommended': list(DEFAULT_BASELINE_CATALOG.recommended),
        },
    }

    output_path = Path(output_file)
    with open(output_path, 'w', encoding='utf-8') as f:
        f.write("# Azure Resource Provider Report configuration\n")
        f.write("# subscriptions.include limits the run to the listed subscription IDs (empty = all enabled).\n")
        f.write("# baseline keys replace the built-in lists: auto_registered, deprecated, required,\n")
        f.write("# recommended, and tiers (tier name -> provider list).\n\n")
        yaml.safe_dump(sample_config, f, default_flow_style=False, indent=2, sort_keys=False)

    return output_path
