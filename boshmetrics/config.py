from argparse import Namespace
from typing import ClassVar

from attrs import field, frozen

from boshmetrics.args import ArgumentParser


@frozen
class BoshMetricsConfig:
    kind: ClassVar[str] = "boshmetrics"
    namespace: str = field(default="bosh", metadata={"description": "Metrics namespace (prefix of every metric name)"})
    environment: str = field(default="", metadata={"description": "Environment label attached to every metric"})
    bosh_name: str = field(default="", metadata={"description": "Name of the BOSH director"})
    bosh_uuid: str = field(default="", metadata={"description": "UUID of the BOSH director"})

    @staticmethod
    def from_args(args: Namespace) -> "BoshMetricsConfig":
        defaults = BoshMetricsConfig()
        return BoshMetricsConfig(
            namespace=args.metrics_namespace if args.metrics_namespace is not None else defaults.namespace,
            environment=args.metrics_environment or defaults.environment,
            bosh_name=args.bosh_name or defaults.bosh_name,
            bosh_uuid=args.bosh_uuid or defaults.bosh_uuid,
        )


def add_args(arg_parser: ArgumentParser) -> None:
    arg_parser.add_argument(
        "--metrics-namespace",
        help="Metrics namespace (default: bosh)",
        default="bosh",
        dest="metrics_namespace",
        type=str,
    )
    arg_parser.add_argument(
        "--metrics-environment",
        help="Environment label to be attached to metrics",
        default="",
        dest="metrics_environment",
        type=str,
    )
    arg_parser.add_argument(
        "--bosh-name",
        help="Name of the BOSH director",
        default="",
        dest="bosh_name",
        type=str,
    )
    arg_parser.add_argument(
        "--bosh-uuid",
        help="UUID of the BOSH director",
        default="",
        dest="bosh_uuid",
        type=str,
    )
