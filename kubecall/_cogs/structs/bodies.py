"""
Rudimentary shapes of the resources as returned by the API.

Only the identifying fields are described. Everything else is passed through
as received: the client does not validate the resources' schemas, it only
ensures that the API returned a JSON object where an object is expected.
"""
from typing import Any, List, Mapping

from typing_extensions import TypedDict


class Meta(TypedDict, total=False):
    name: str
    namespace: str
    uid: str
    resourceVersion: str
    labels: Mapping[str, str]
    annotations: Mapping[str, str]


class RawBody(TypedDict, total=False):
    apiVersion: str
    kind: str
    metadata: Meta
    spec: Mapping[str, Any]
    status: Mapping[str, Any]


class Pod(RawBody, total=False):
    pass


class Job(RawBody, total=False):
    pass


class Secret(RawBody, total=False):
    type: str
    data: Mapping[str, str]
    stringData: Mapping[str, str]


class RawList(TypedDict, total=False):
    apiVersion: str
    kind: str
    metadata: Mapping[str, Any]
    items: List[Any]


def labels_to_selector(labels: Mapping[str, str]) -> str:
    """
    Render the labels as a selector for the ``labelSelector=`` query parameter.

    Every label is an equality clause, all of them must match together.
    """
    return ','.join(f'{key} = {val}' for key, val in labels.items())
