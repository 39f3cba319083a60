import logging
import os
from pathlib import Path
from typing import Dict, Mapping, Optional, Union

import yaml
from cerberus import Validator

from resource_migrator.models import migration_settings
from resource_migrator.models.cluster import Cluster
from resource_migrator.models.migration_settings import MigrationSettings

logger = logging.getLogger(__name__)


SCHEMA = {
    "source_cluster": {"type": "dict", "required": False},
    "target_cluster": {"type": "dict", "required": False},
    "migration": {"type": "dict", "required": False, "schema": migration_settings.SCHEMA},
}

SOURCE_CLUSTER_ENV = "SOURCE_ES_CLUSTER"
TARGET_CLUSTER_ENV = "TARGET_ES_CLUSTER"
SOURCE_USERNAME_ENV = "SOURCE_ES_USERNAME"
SOURCE_PASSWORD_ENV = "SOURCE_ES_PASSWORD"
TARGET_USERNAME_ENV = "TARGET_ES_USERNAME"
TARGET_PASSWORD_ENV = "TARGET_ES_PASSWORD"


def _cluster_config_from_env(env: Mapping[str, str], url_var: str, username_var: str, password_var: str) -> Dict:
    endpoint = env.get(url_var)
    if not endpoint:
        raise ValueError(f"Environment variable {url_var} must be set to the cluster URL")
    username = env.get(username_var)
    password = env.get(password_var)
    if username and password:
        return {"endpoint": endpoint, "basic_auth": {"username": username, "password": password}}
    return {"endpoint": endpoint, "no_auth": None}


class Environment:
    source_cluster: Optional[Cluster] = None
    target_cluster: Optional[Cluster] = None
    settings: MigrationSettings
    config: Dict

    def __init__(self, config_file: Optional[Union[str, Path]] = None, config: Optional[Dict] = None):
        """
        Initialize the environment either from a configuration file or a direct configuration object.

        :param config_file: Path to the YAML config file.
        :param config: Direct configuration object, used when no config_file is given.
        """
        if config_file:
            logger.info(f"Loading config file: {config_file}")
            with open(config_file) as f:
                self.config = yaml.safe_load(f) or {}
                logger.info(f"Loaded config file: {config_file}")
        elif isinstance(config, Dict):
            self.config = config
            logger.info("Using provided config")
        else:
            raise ValueError("Either config or config_file must be provided.")

        v = Validator(SCHEMA)
        if not v.validate(self.config):
            logger.error(f"Config file validation errors: {v.errors}")
            raise ValueError("Invalid config file", v.errors)

        if 'source_cluster' in self.config:
            self.source_cluster = Cluster(config=self.config["source_cluster"], name="source")
            logger.info(f"Source cluster initialized: {self.source_cluster.endpoint}")
        else:
            logger.warning("No source cluster provided. Migrations and validations cannot proceed.")

        if 'target_cluster' in self.config:
            self.target_cluster = Cluster(config=self.config["target_cluster"], name="target")
            logger.info(f"Target cluster initialized: {self.target_cluster.endpoint}")
        else:
            logger.warning("No target cluster provided. Migrations and validations cannot proceed.")

        self.settings = MigrationSettings.from_config(self.config.get("migration") or {})
        logger.info(f"Migration settings: {self.settings}")

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Environment":
        """Build an environment from the SOURCE_ES_* and TARGET_ES_* variables.
        Basic auth is used for a cluster only when both its username and password are set.
        """
        env = env if env is not None else os.environ
        logger.info("Loading cluster configuration from environment variables")
        return cls(config={
            "source_cluster": _cluster_config_from_env(env, SOURCE_CLUSTER_ENV, SOURCE_USERNAME_ENV,
                                                       SOURCE_PASSWORD_ENV),
            "target_cluster": _cluster_config_from_env(env, TARGET_CLUSTER_ENV, TARGET_USERNAME_ENV,
                                                       TARGET_PASSWORD_ENV),
        })

    @classmethod
    def load(cls, config_file: Union[str, Path], env: Optional[Mapping[str, str]] = None) -> "Environment":
        if Path(config_file).exists():
            return cls(config_file=config_file)
        logger.info(f"Config file {config_file} not found, falling back to environment variables")
        return cls.from_env(env)

    def require_clusters(self):
        if self.source_cluster is None or self.target_cluster is None:
            raise ValueError("Both a source and a target cluster must be defined.")
        return self.source_cluster, self.target_cluster
