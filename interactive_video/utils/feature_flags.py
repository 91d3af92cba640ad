"""
Feature Flags System
Environment-based feature control for the interactive video backend
"""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional

from fastapi import HTTPException


class Environment(Enum):
    DEVELOPMENT = "development"
    TEST = "test"
    STAGING = "staging"
    PRODUCTION = "production"


ALL_ENVIRONMENTS = [
    Environment.DEVELOPMENT, Environment.TEST, Environment.STAGING, Environment.PRODUCTION
]


@dataclass
class FeatureFlag:
    name: str
    enabled: bool
    description: str
    environments: List[Environment]


class FeatureFlagService:
    """Service for managing feature flags"""

    def __init__(self):
        self.current_environment = self._get_current_environment()
        self.flags = self._initialize_flags()

    def _get_current_environment(self) -> Environment:
        """Get current environment from environment variable"""
        env_name = os.getenv('ENVIRONMENT', 'development').lower()
        try:
            return Environment(env_name)
        except ValueError:
            return Environment.DEVELOPMENT

    def _initialize_flags(self) -> Dict[str, FeatureFlag]:
        flags = {
            'scorm_export': FeatureFlag(
                name='scorm_export',
                enabled=True,
                description='Export interactive videos as SCORM 1.2 packages',
                environments=ALL_ENVIRONMENTS,
            ),
            'csv_import': FeatureFlag(
                name='csv_import',
                enabled=True,
                description='Accept CSV element lists on import',
                environments=ALL_ENVIRONMENTS,
            ),
            'preview_mode': FeatureFlag(
                name='preview_mode',
                enabled=True,
                description='Server-side scheduler preview for the editor',
                environments=[Environment.DEVELOPMENT, Environment.TEST, Environment.STAGING],
            ),
            'server_side_scoring': FeatureFlag(
                name='server_side_scoring',
                enabled=True,
                description='Resolve viewer responses and persist progress on the server',
                environments=ALL_ENVIRONMENTS,
            ),
        }

        self._apply_environment_overrides(flags)
        return flags

    def _apply_environment_overrides(self, flags: Dict[str, FeatureFlag]) -> None:
        for flag in flags.values():
            flag.enabled = self.current_environment in flag.environments

            env_override = os.getenv(f"FEATURE_{flag.name.upper()}")
            if env_override is not None:
                flag.enabled = env_override.lower() in ('true', '1', 'yes', 'on')

    def reload(self) -> None:
        """Re-read ENVIRONMENT and FEATURE_* overrides"""
        self.current_environment = self._get_current_environment()
        self.flags = self._initialize_flags()

    def is_enabled(self, flag_name: str) -> bool:
        flag = self.flags.get(flag_name)
        if flag is None:
            return False
        return flag.enabled

    def get_flag(self, flag_name: str) -> Optional[FeatureFlag]:
        return self.flags.get(flag_name)

    def get_enabled_flags(self) -> List[str]:
        return [name for name, flag in self.flags.items() if flag.enabled]

    def get_environment_info(self) -> Dict:
        return {
            'current_environment': self.current_environment.value,
            'total_flags': len(self.flags),
            'enabled_flags': len(self.get_enabled_flags()),
            'flag_summary': {name: flag.enabled for name, flag in self.flags.items()}
        }


# Global feature flag service instance
feature_flags = FeatureFlagService()


def is_feature_enabled(flag_name: str) -> bool:
    return feature_flags.is_enabled(flag_name)


def feature_required(flag_name: str) -> Callable:
    """Build a FastAPI dependency that 404s while ``flag_name`` is off"""
    async def dependency() -> None:
        if not is_feature_enabled(flag_name):
            raise HTTPException(
                status_code=404,
                detail=f"Feature '{flag_name}' is not available"
            )
    return dependency
