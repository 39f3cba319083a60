from enum import Enum
from typing import Iterable, Optional
from urllib.parse import urlparse

import boto3
import requests.auth
import requests.utils
from botocore.auth import SigV4Auth
from botocore.awsrequest import AWSRequest
from jsondiff import diff
from requests.models import PreparedRequest


class ExitCode(Enum):
    SUCCESS = 0
    FAILURE = 1


def create_boto3_client(aws_service_name: str, region: Optional[str] = None):
    return boto3.client(aws_service_name, region_name=region)


# Utility method to make a comma-separated string from a collection of names.
# If the collection is empty, "[]" is returned for clarity.
def string_from_names(names: Iterable[str]) -> str:
    return "[" + ", ".join(names) + "]"


# Compares the JSON contents of two resource definitions. A definition missing
# on only one side counts as a difference.
def has_differences(definition1: Optional[dict], definition2: Optional[dict]) -> bool:
    if definition1 is None and definition2 is None:
        return False
    elif definition1 is not None and definition2 is not None:
        return bool(diff(definition1, definition2))
    return True


# The SigV4AuthPlugin lets the requests library sign calls to Amazon OpenSearch Service
# (or Serverless) domains with AWS Signature Version 4, using the default boto3 credential chain.
class SigV4AuthPlugin(requests.auth.AuthBase):
    def __init__(self, service, region):
        self.service = service
        self.region = region
        session = boto3.Session()
        self.credentials = session.get_credentials()

    def __call__(self, r: PreparedRequest) -> PreparedRequest:
        # Headers that requests may rewrite after signing are left out of the signature
        excluded_headers = {h.lower() for h in requests.utils.default_headers().keys()}

        # The port must not be part of the signed host
        r.headers['Host'] = urlparse(r.url).hostname

        filtered_headers = {k: v for k, v in r.headers.items() if k.lower() not in excluded_headers}
        aws_request = AWSRequest(method=r.method, url=r.url, data=r.body, headers=filtered_headers)
        signer = SigV4Auth(self.credentials, self.service, self.region)
        if aws_request.body is not None:
            aws_request.headers['x-amz-content-sha256'] = signer.payload(aws_request)
        signer.add_auth(aws_request)
        r.headers.update(dict(aws_request.headers))
        return r
