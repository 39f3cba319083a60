from typing import Any, Dict, NamedTuple, Optional
from enum import Enum
import json
import logging

import requests
import requests.auth
from cerberus import Validator
from requests.auth import HTTPBasicAuth

from resource_migrator.exceptions import NotFoundError, RequestError
from resource_migrator.models.utils import SigV4AuthPlugin, create_boto3_client

logger = logging.getLogger(__name__)

AuthMethod = Enum("AuthMethod", ["NO_AUTH", "BASIC_AUTH", "SIGV4"])
HttpMethod = Enum("HttpMethod", ["GET", "PUT", "HEAD"])

DEFAULT_TIMEOUT_SECONDS = 30


def contains_one_of(values_to_restrict: set):
    """
    Generates a cerberus check that a dict holds exactly one of the given keys.
    """
    def one_of(field, value, error):
        found_objects = values_to_restrict.intersection(value.keys())
        if len(found_objects) > 1:
            error(field, f"More than one value is present: {sorted(found_objects)}")
        elif len(found_objects) < 1:
            error(field, f"No values are present from set: {sorted(values_to_restrict)}")
    return one_of


def validate_basic_auth_options(field, value, error):
    has_user_pass = value.get("username") is not None and value.get("password") is not None
    has_user_secret = value.get("user_secret_arn") is not None

    if has_user_pass and has_user_secret:
        error(field, "Cannot provide both (username + password) and user_secret_arn")
    elif not has_user_pass and not has_user_secret:
        error(field, "Must provide either (username + password) or user_secret_arn")


BASIC_AUTH_SCHEMA = {
    "type": "dict",
    "schema": {
        "username": {"type": "string", "required": False},
        "password": {"type": "string", "required": False},
        "user_secret_arn": {"type": "string", "required": False},
    },
    "check_with": validate_basic_auth_options
}

SIGV4_SCHEMA = {
    "nullable": True,
    "type": "dict",
    "schema": {
        "region": {"type": "string", "required": False},
        "service": {"type": "string", "required": False}
    }
}

SCHEMA = {
    "cluster": {
        "type": "dict",
        "schema": {
            "endpoint": {"type": "string", "required": True, "empty": False},
            "allow_insecure": {"type": "boolean", "required": False},
            "timeout": {"type": "number", "required": False, "min": 1},
            "no_auth": {"nullable": True},
            "basic_auth": BASIC_AUTH_SCHEMA,
            "sigv4": SIGV4_SCHEMA
        },
        "check_with": contains_one_of({auth.name.lower() for auth in AuthMethod})
    }
}


class AuthDetails(NamedTuple):
    username: str
    password: str


class Cluster:
    """
    A source or target Elasticsearch/OpenSearch cluster, and the transport used to reach it.
    Requests are synchronous, so a single Cluster never has more than one request in flight.
    """

    config: Dict
    name: str
    endpoint: str = ""
    auth_type: Optional[AuthMethod] = None
    auth_details: Optional[Dict[str, Any]] = None
    allow_insecure: bool = False
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    def __init__(self, config: Dict, name: str = "cluster") -> None:
        v = Validator(SCHEMA)
        if not v.validate({'cluster': config}):
            raise ValueError("Invalid config file for cluster", v.errors)

        self.config = config
        self.name = name
        self.endpoint = config["endpoint"].rstrip("/")
        self.allow_insecure = config.get("allow_insecure", False)
        self.timeout = config.get("timeout", DEFAULT_TIMEOUT_SECONDS)
        if 'no_auth' in config:
            self.auth_type = AuthMethod.NO_AUTH
        elif 'basic_auth' in config:
            self.auth_type = AuthMethod.BASIC_AUTH
            self.auth_details = config["basic_auth"]
        elif 'sigv4' in config:
            self.auth_type = AuthMethod.SIGV4
            self.auth_details = config["sigv4"] if config["sigv4"] is not None else {}
        logger.info(f"Initialized {self.name} cluster at {self.endpoint} with auth {self.auth_type.name}")

    def __repr__(self) -> str:
        return f"Cluster(name={self.name!r}, endpoint={self.endpoint!r})"

    def get_basic_auth_details(self) -> AuthDetails:
        """Return (username, password) for basic auth, either from plaintext config or from the
        username/password keys of an AWS Secrets Manager secret.
        """
        assert self.auth_type == AuthMethod.BASIC_AUTH
        if "username" in self.auth_details and "password" in self.auth_details:
            return AuthDetails(username=self.auth_details["username"], password=self.auth_details["password"])
        client = create_boto3_client(aws_service_name="secretsmanager")
        secret_response = client.get_secret_value(SecretId=self.auth_details["user_secret_arn"])
        try:
            secret_dict = json.loads(secret_response["SecretString"])
        except json.JSONDecodeError:
            raise ValueError(f"Expected secret {self.auth_details['user_secret_arn']} to be a JSON object with "
                             f"username and password fields")
        return AuthDetails(username=secret_dict["username"], password=secret_dict["password"])

    def _get_sigv4_details(self) -> tuple[str, Optional[str]]:
        assert self.auth_type == AuthMethod.SIGV4
        return self.auth_details.get("service", "es"), self.auth_details.get("region", None)

    def _generate_auth_object(self) -> requests.auth.AuthBase | None:
        if self.auth_type == AuthMethod.BASIC_AUTH:
            auth_details = self.get_basic_auth_details()
            return HTTPBasicAuth(auth_details.username, auth_details.password)
        elif self.auth_type == AuthMethod.SIGV4:
            service_name, region_name = self._get_sigv4_details()
            return SigV4AuthPlugin(service_name, region_name)
        return None

    def call_api(self, path: str, method: HttpMethod = HttpMethod.GET, data=None, headers=None,
                 timeout=None, session=None, raise_error=True) -> requests.Response:
        """
        Calls an API on the cluster. `path` is relative to the cluster endpoint.
        """
        if session is None:
            session = requests.Session()
        if not path.startswith("/"):
            path = "/" + path

        r = session.request(
            method.name,
            f"{self.endpoint}{path}",
            verify=(not self.allow_insecure),
            auth=self._generate_auth_object(),
            data=data,
            headers=headers,
            timeout=timeout if timeout is not None else self.timeout
        )
        logger.debug(f"call_api request {method.name} {self.endpoint}{path}, response: {r.status_code} "
                     f"{r.text[:1000]}")
        if raise_error:
            r.raise_for_status()
        return r

    def get(self, path: str) -> str:
        """GET `path` and return the raw response body.

        Raises NotFoundError on HTTP 404 and RequestError for every other failure.
        """
        try:
            return self.call_api(path).text
        except requests.HTTPError as e:
            if e.response is not None and e.response.status_code == 404:
                raise NotFoundError(f"Resource not found on {self.name} cluster: {path}") from e
            status = e.response.status_code if e.response is not None else None
            raise RequestError(f"HTTPError on GET request to {self.name} cluster: {path} - {e!s}",
                               status_code=status) from e
        except requests.ConnectionError as e:
            raise RequestError(f"ConnectionError on GET request to {self.name} cluster: {path}") from e
        except requests.Timeout as e:
            raise RequestError(f"Timed out on GET request to {self.name} cluster: {path}") from e
        except requests.exceptions.RequestException as e:
            raise RequestError(f"GET request failure to {self.name} cluster: {path} - {e!s}") from e

    def put(self, path: str, body: dict) -> None:
        """PUT `body` as JSON to `path`. On failure the RequestError message is the cluster's response
        body when there is one, so the caller can report why the write was refused.
        """
        try:
            r = self.call_api(path, method=HttpMethod.PUT, data=json.dumps(body),
                              headers={"Content-Type": "application/json"}, raise_error=False)
        except requests.exceptions.RequestException as e:
            raise RequestError(f"PUT request failure to {self.name} cluster: {path} - {e!s}") from e
        if not r.ok:
            detail = r.text if r.text else f"HTTP {r.status_code}"
            raise RequestError(detail, status_code=r.status_code)
