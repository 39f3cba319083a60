import copy
import json
from typing import Dict, List, Optional, Tuple

from resource_migrator.exceptions import NotFoundError, RequestError
from resource_migrator.logic.enumerator import ALL_INDICES_PATH
from resource_migrator.models.cluster import AuthMethod, Cluster


def create_valid_cluster(endpoint: str = "https://opensearchtarget:9200",
                         allow_insecure: bool = True,
                         auth_type: AuthMethod = AuthMethod.BASIC_AUTH,
                         details: Optional[Dict] = None,
                         name: str = "cluster"):

    if details is None and auth_type == AuthMethod.BASIC_AUTH:
        details = {"username": "admin", "password": "myStrongPassword123!"}

    custom_cluster_config = {
        "endpoint": endpoint,
        "allow_insecure": allow_insecure,
        auth_type.name.lower(): details if details else {}
    }
    return Cluster(custom_cluster_config, name=name)


class FakeCluster(Cluster):
    """
    An in-memory cluster. GET answers from `responses` (path -> JSON-able value, raw string or an
    exception to raise), unknown paths answer 404. PUTs are recorded and become visible to later
    existence probes, and written indices show up in the all-indices listing.
    """

    def __init__(self, name: str, responses: Optional[Dict] = None, put_errors: Optional[Dict[str, str]] = None):
        super().__init__({"endpoint": f"http://{name}:9200", "no_auth": None}, name=name)
        self.responses = copy.deepcopy(responses) if responses else {}
        self.put_errors = put_errors if put_errors else {}
        self.gets: List[str] = []
        self.puts: List[Tuple[str, dict]] = []

    def get(self, path: str) -> str:
        self.gets.append(path)
        if path not in self.responses:
            raise NotFoundError(f"Resource not found on {self.name} cluster: {path}")
        response = self.responses[path]
        if isinstance(response, Exception):
            raise response
        if isinstance(response, str):
            return response
        return json.dumps(response)

    def put(self, path: str, body: dict) -> None:
        if path in self.put_errors:
            raise RequestError(self.put_errors[path], status_code=400)
        self.puts.append((path, body))
        self.responses[path] = body
        if not path.startswith("/_"):
            name = path.lstrip("/")
            self.responses[f"{path}/_settings"] = {name: {"settings": body.get("settings", {})}}
            if ALL_INDICES_PATH in self.responses:
                self.responses[ALL_INDICES_PATH].append({"i": name})

    @property
    def written(self) -> List[str]:
        return [path for path, _ in self.puts]


def index_document(name: str, mappings: Optional[Dict] = None, aliases: Optional[Dict] = None) -> Dict:
    """A GET /<index>/ response body."""
    return {
        name: {
            "aliases": aliases if aliases is not None else {},
            "mappings": mappings if mappings is not None else {"properties": {"title": {"type": "text"}}},
            "settings": {
                "index": {
                    "number_of_shards": "1",
                    "number_of_replicas": "2",
                    "refresh_interval": "1s",
                    "uuid": "2lKexkKnRdWw3t4FN3Xq0A",
                    "creation_date": "1700000000000",
                    "provided_name": name,
                    "version": {"created": "7100299"},
                }
            }
        }
    }
