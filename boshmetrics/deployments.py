from typing import Any, Dict, List, Optional

import jsons
from attrs import define, field


@define
class Release:
    name: str
    version: str


@define
class Stemcell:
    name: str
    version: str
    os_name: str


@define
class Instance:
    vm_type: str
    name: Optional[str] = None
    id: Optional[str] = None
    az: Optional[str] = None


@define
class DeploymentInfo:
    """One BOSH deployment as seen in a single snapshot of the director state."""

    name: str
    releases: List[Release] = field(factory=list)
    stemcells: List[Stemcell] = field(factory=list)
    instances: List[Instance] = field(factory=list)


def deployment_from_json(data: Dict[str, Any]) -> DeploymentInfo:
    return jsons.load(data, DeploymentInfo)


def deployments_from_json(data: List[Dict[str, Any]]) -> List[DeploymentInfo]:
    """Turn the list of deployment objects returned by the director into a snapshot.

    Keys that are not part of the model are ignored, missing collections
    become empty lists. The input order is preserved.
    """
    return [deployment_from_json(deployment) for deployment in data]
