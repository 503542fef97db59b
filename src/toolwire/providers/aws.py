"""AWS provider — thin boto3-backed handlers for the cloud tool catalog.

Every handler forwards its parameters to one AWS API call and wraps the
interesting part of the reply as ``{"result": {...}}``.  boto3 calls are
blocking, so they run on a worker thread.

Requires the ``boto3`` package (optional dependency ``aws``).  It is imported
on first use; without it every AWS tool fails with a message naming the extra.

An optional ``region`` parameter switches the shared active region in
:class:`~toolwire.tools.context.ProviderConfig`, so later calls without a
region use it too.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

from toolwire.tools.registry import ParameterSchema, ToolDescriptor

if TYPE_CHECKING:
    from toolwire.tools.context import ProviderConfig, ToolContext
    from toolwire.tools.registry import Handler

logger = logging.getLogger(__name__)

_REGION = {"type": "string", "description": "AWS region (e.g., us-west-2)"}
_MAX_ITEMS = {"type": "number", "description": "Maximum number of items to return"}
_STRING_LIST = {"type": "array", "items": {"type": "string"}}

_RELATIVE_UNITS = {"m": 60, "h": 3600, "d": 86400}


class ProviderError(Exception):
    """An AWS API call failed."""

    def __init__(self, service: str, detail: str = "") -> None:
        self.service = service
        self.detail = detail
        super().__init__(f"{service} Error: {detail}")


# ---------------------------------------------------------------------------
# Parameter helpers
# ---------------------------------------------------------------------------


def resolve_region(parameters: dict[str, Any], config: ProviderConfig) -> str:
    """Return the region for this call, making an explicit one sticky."""
    region = parameters.get("region")
    if region:
        if region != config.region:
            logger.info("Switching active region %s -> %s", config.region, region)
        config.region = region
        return str(region)
    return config.region


def parse_time(value: str | None, *, default: datetime, now: datetime | None = None) -> datetime:
    """Parse an ISO timestamp or a relative offset such as ``-3h``, ``-1d``, ``-30m``."""
    if not value:
        return default
    if value.startswith("-"):
        unit, amount = value[-1], value[1:-1]
        if unit not in _RELATIVE_UNITS or not amount.isdigit():
            msg = f"Invalid relative time: {value}"
            raise ValueError(msg)
        return (now or datetime.now(UTC)) - timedelta(seconds=int(amount) * _RELATIVE_UNITS[unit])
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as exc:
        msg = f"Invalid timestamp: {value}"
        raise ValueError(msg) from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _require(parameters: dict[str, Any], key: str, message: str) -> Any:
    value = parameters.get(key)
    if not value:
        raise ValueError(message)
    return value


def _present(**values: Any) -> dict[str, Any]:
    """Keyword arguments with the unset ones dropped."""
    return {k: v for k, v in values.items() if v is not None}


def _int_or_none(value: Any) -> int | None:
    return None if value is None else int(value)


def _load_boto3() -> Any:
    try:
        import boto3  # pyright: ignore[reportMissingImports]
    except ImportError as exc:
        msg = "boto3 package required for AWS tools, install with: pip install toolwire[aws]"
        raise ImportError(msg) from exc
    return boto3


# ---------------------------------------------------------------------------
# Provider
# ---------------------------------------------------------------------------


class AwsProvider:
    """Builds boto3 clients on demand and exposes one handler per tool.

    Usage::

        provider = AwsProvider()
        for descriptor, handler in provider.tools():
            registry.register(descriptor, handler)
    """

    def __init__(self) -> None:
        self._sessions: dict[str | None, Any] = {}
        self._clients: dict[tuple[str, str, str | None], Any] = {}

    def client(self, service: str, config: ProviderConfig, region: str) -> Any:
        """Return a cached boto3 client for *service* in *region*."""
        key = (service, region, config.profile)
        if key not in self._clients:
            session = self._sessions.get(config.profile)
            if session is None:
                session = _load_boto3().session.Session(profile_name=config.profile)
                self._sessions[config.profile] = session
            self._clients[key] = session.client(service, region_name=region)
        return self._clients[key]

    async def call(
        self,
        label: str,
        service: str,
        operation: str,
        context: ToolContext,
        region: str,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Run one boto3 operation on a worker thread.

        Raises:
            ProviderError: When the client cannot be built or the call fails.
        """
        try:
            client = self.client(service, context.config, region)
            return await asyncio.to_thread(getattr(client, operation), **kwargs)
        except ImportError:
            raise
        except Exception as exc:
            raise ProviderError(label, str(exc)) from exc

    def tools(self) -> list[tuple[ToolDescriptor, Handler]]:
        """Descriptors and handlers in catalog order."""
        return [(descriptor, getattr(self, attr)) for descriptor, attr in _CATALOG]

    # -- EC2 ----------------------------------------------------------------

    async def describe_instances(self, parameters: dict[str, Any], context: ToolContext) -> dict[str, Any]:
        region = resolve_region(parameters, context.config)
        reply = await self.call(
            "EC2", "ec2", "describe_instances", context, region,
            Filters=parameters.get("filters") or [],
        )
        reservations = reply.get("Reservations", [])
        return {
            "result": {
                "region": region,
                "reservations": reservations,
                "instanceCount": sum(len(r.get("Instances", [])) for r in reservations),
            }
        }

    async def describe_vpcs(self, parameters: dict[str, Any], context: ToolContext) -> dict[str, Any]:
        region = resolve_region(parameters, context.config)
        reply = await self.call(
            "EC2", "ec2", "describe_vpcs", context, region,
            **_present(VpcIds=parameters.get("vpcIds")),
        )
        return {"result": {"region": region, "vpcs": reply.get("Vpcs", [])}}

    async def describe_security_groups(self, parameters: dict[str, Any], context: ToolContext) -> dict[str, Any]:
        region = resolve_region(parameters, context.config)
        reply = await self.call(
            "EC2", "ec2", "describe_security_groups", context, region,
            **_present(GroupIds=parameters.get("groupIds")),
        )
        return {"result": {"region": region, "securityGroups": reply.get("SecurityGroups", [])}}

    # -- S3 -----------------------------------------------------------------

    async def list_buckets(self, parameters: dict[str, Any], context: ToolContext) -> dict[str, Any]:
        region = resolve_region(parameters, context.config)
        reply = await self.call("S3", "s3", "list_buckets", context, region)
        return {"result": {"region": region, "buckets": reply.get("Buckets", [])}}

    async def list_objects(self, parameters: dict[str, Any], context: ToolContext) -> dict[str, Any]:
        region = resolve_region(parameters, context.config)
        bucket = _require(parameters, "bucket", "Bucket name is required")
        prefix = parameters.get("prefix") or None
        reply = await self.call(
            "S3", "s3", "list_objects_v2", context, region,
            **_present(Bucket=bucket, Prefix=prefix),
        )
        return {
            "result": {
                "region": region,
                "bucket": bucket,
                "prefix": prefix or "",
                "objects": reply.get("Contents", []),
                "count": reply.get("KeyCount", 0),
            }
        }

    # -- Lambda -------------------------------------------------------------

    async def list_functions(self, parameters: dict[str, Any], context: ToolContext) -> dict[str, Any]:
        region = resolve_region(parameters, context.config)
        reply = await self.call("Lambda", "lambda", "list_functions", context, region)
        return {"result": {"region": region, "functions": reply.get("Functions", [])}}

    async def get_function_configuration(self, parameters: dict[str, Any], context: ToolContext) -> dict[str, Any]:
        region = resolve_region(parameters, context.config)
        name = _require(parameters, "functionName", "Function name is required")
        reply = await self.call(
            "Lambda", "lambda", "get_function_configuration", context, region, FunctionName=name
        )
        reply.pop("ResponseMetadata", None)
        return {"result": {"region": region, "configuration": reply}}

    # -- DynamoDB -----------------------------------------------------------

    async def list_tables(self, parameters: dict[str, Any], context: ToolContext) -> dict[str, Any]:
        region = resolve_region(parameters, context.config)
        reply = await self.call("DynamoDB", "dynamodb", "list_tables", context, region)
        return {"result": {"region": region, "tables": reply.get("TableNames", [])}}

    async def describe_table(self, parameters: dict[str, Any], context: ToolContext) -> dict[str, Any]:
        region = resolve_region(parameters, context.config)
        name = _require(parameters, "tableName", "Table name is required")
        reply = await self.call("DynamoDB", "dynamodb", "describe_table", context, region, TableName=name)
        return {"result": {"region": region, "table": reply.get("Table", {})}}

    # -- CloudWatch ---------------------------------------------------------

    async def get_metric_statistics(self, parameters: dict[str, Any], context: ToolContext) -> dict[str, Any]:
        region = resolve_region(parameters, context.config)
        namespace = _require(parameters, "namespace", "Namespace is required")
        metric_name = _require(parameters, "metricName", "Metric name is required")

        now = datetime.now(UTC)
        start = parse_time(parameters.get("startTime"), default=now - timedelta(hours=1), now=now)
        end = parse_time(parameters.get("endTime"), default=now, now=now)

        reply = await self.call(
            "CloudWatch", "cloudwatch", "get_metric_statistics", context, region,
            Namespace=namespace,
            MetricName=metric_name,
            Dimensions=parameters.get("dimensions") or [],
            StartTime=start,
            EndTime=end,
            Period=int(parameters.get("period") or 300),
            Statistics=parameters.get("statistics") or ["Average"],
        )
        return {
            "result": {
                "region": region,
                "namespace": namespace,
                "metricName": metric_name,
                "datapoints": reply.get("Datapoints", []),
                "label": reply.get("Label"),
            }
        }

    async def describe_alarms(self, parameters: dict[str, Any], context: ToolContext) -> dict[str, Any]:
        region = resolve_region(parameters, context.config)
        reply = await self.call(
            "CloudWatch", "cloudwatch", "describe_alarms", context, region,
            **_present(
                AlarmNames=parameters.get("alarmNames"),
                AlarmTypes=parameters.get("alarmTypes"),
                StateValue=parameters.get("stateValue"),
            ),
        )
        return {
            "result": {
                "region": region,
                "metricAlarms": reply.get("MetricAlarms", []),
                "compositeAlarms": reply.get("CompositeAlarms", []),
            }
        }

    # -- IAM (global) -------------------------------------------------------

    async def list_users(self, parameters: dict[str, Any], context: ToolContext) -> dict[str, Any]:
        reply = await self.call(
            "IAM", "iam", "list_users", context, context.config.region,
            **_present(PathPrefix=parameters.get("pathPrefix"), MaxItems=_int_or_none(parameters.get("maxItems"))),
        )
        return {"result": {"users": reply.get("Users", []), "isTruncated": reply.get("IsTruncated", False)}}

    async def list_roles(self, parameters: dict[str, Any], context: ToolContext) -> dict[str, Any]:
        reply = await self.call(
            "IAM", "iam", "list_roles", context, context.config.region,
            **_present(PathPrefix=parameters.get("pathPrefix"), MaxItems=_int_or_none(parameters.get("maxItems"))),
        )
        return {"result": {"roles": reply.get("Roles", []), "isTruncated": reply.get("IsTruncated", False)}}

    # -- RDS, SNS, SQS ------------------------------------------------------

    async def describe_db_instances(self, parameters: dict[str, Any], context: ToolContext) -> dict[str, Any]:
        region = resolve_region(parameters, context.config)
        reply = await self.call(
            "RDS", "rds", "describe_db_instances", context, region,
            **_present(DBInstanceIdentifier=parameters.get("dbInstanceIdentifier")),
        )
        return {"result": {"region": region, "dbInstances": reply.get("DBInstances", [])}}

    async def list_topics(self, parameters: dict[str, Any], context: ToolContext) -> dict[str, Any]:
        region = resolve_region(parameters, context.config)
        reply = await self.call("SNS", "sns", "list_topics", context, region)
        return {"result": {"region": region, "topics": reply.get("Topics", [])}}

    async def list_queues(self, parameters: dict[str, Any], context: ToolContext) -> dict[str, Any]:
        region = resolve_region(parameters, context.config)
        reply = await self.call(
            "SQS", "sqs", "list_queues", context, region,
            **_present(QueueNamePrefix=parameters.get("queueNamePrefix")),
        )
        return {"result": {"region": region, "queueUrls": reply.get("QueueUrls", [])}}

    # -- CloudFormation, Route53, CloudFront --------------------------------

    async def list_stacks(self, parameters: dict[str, Any], context: ToolContext) -> dict[str, Any]:
        region = resolve_region(parameters, context.config)
        reply = await self.call(
            "CloudFormation", "cloudformation", "list_stacks", context, region,
            **_present(StackStatusFilter=parameters.get("stackStatusFilter")),
        )
        return {"result": {"region": region, "stacks": reply.get("StackSummaries", [])}}

    async def list_hosted_zones(self, parameters: dict[str, Any], context: ToolContext) -> dict[str, Any]:
        max_items = _int_or_none(parameters.get("maxItems"))
        reply = await self.call(
            "Route53", "route53", "list_hosted_zones", context, context.config.region,
            **_present(MaxItems=None if max_items is None else str(max_items)),
        )
        return {"result": {"hostedZones": reply.get("HostedZones", [])}}

    async def list_distributions(self, parameters: dict[str, Any], context: ToolContext) -> dict[str, Any]:
        max_items = _int_or_none(parameters.get("maxItems"))
        reply = await self.call(
            "CloudFront", "cloudfront", "list_distributions", context, context.config.region,
            **_present(MaxItems=None if max_items is None else str(max_items)),
        )
        distributions = reply.get("DistributionList", {}).get("Items", [])
        return {"result": {"distributions": distributions}}

    # -- Containers ---------------------------------------------------------

    async def list_ecs_clusters(self, parameters: dict[str, Any], context: ToolContext) -> dict[str, Any]:
        region = resolve_region(parameters, context.config)
        reply = await self.call("ECS", "ecs", "list_clusters", context, region)
        return {"result": {"region": region, "clusterArns": reply.get("clusterArns", [])}}

    async def list_eks_clusters(self, parameters: dict[str, Any], context: ToolContext) -> dict[str, Any]:
        region = resolve_region(parameters, context.config)
        reply = await self.call("EKS", "eks", "list_clusters", context, region)
        return {"result": {"region": region, "clusters": reply.get("clusters", [])}}


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


def _tool(name: str, description: str, properties: dict[str, Any], required: tuple[str, ...] = ()) -> ToolDescriptor:
    return ToolDescriptor(
        name=name,
        description=description,
        parameters=ParameterSchema(properties=properties, required=required),
    )


_CATALOG: list[tuple[ToolDescriptor, str]] = [
    (
        _tool(
            "aws.ec2.describeInstances",
            "List EC2 instances and their details",
            {
                "region": _REGION,
                "filters": {
                    "type": "array",
                    "description": "Optional filters to apply",
                    "items": {
                        "type": "object",
                        "properties": {"Name": {"type": "string"}, "Values": _STRING_LIST},
                    },
                },
            },
        ),
        "describe_instances",
    ),
    (
        _tool(
            "aws.ec2.describeVpcs",
            "List VPCs and their details",
            {"region": _REGION, "vpcIds": {**_STRING_LIST, "description": "Optional VPC IDs to filter"}},
        ),
        "describe_vpcs",
    ),
    (
        _tool(
            "aws.ec2.describeSecurityGroups",
            "List security groups and their details",
            {"region": _REGION, "groupIds": {**_STRING_LIST, "description": "Optional security group IDs to filter"}},
        ),
        "describe_security_groups",
    ),
    (_tool("aws.s3.listBuckets", "List all S3 buckets", {"region": _REGION}), "list_buckets"),
    (
        _tool(
            "aws.s3.listObjects",
            "List objects in an S3 bucket",
            {
                "region": _REGION,
                "bucket": {"type": "string", "description": "S3 bucket name"},
                "prefix": {"type": "string", "description": "Optional prefix to filter objects"},
            },
            required=("bucket",),
        ),
        "list_objects",
    ),
    (_tool("aws.lambda.listFunctions", "List Lambda functions", {"region": _REGION}), "list_functions"),
    (
        _tool(
            "aws.lambda.getFunctionConfiguration",
            "Get detailed configuration for a Lambda function",
            {
                "region": _REGION,
                "functionName": {"type": "string", "description": "Name or ARN of the Lambda function"},
            },
            required=("functionName",),
        ),
        "get_function_configuration",
    ),
    (_tool("aws.dynamodb.listTables", "List DynamoDB tables", {"region": _REGION}), "list_tables"),
    (
        _tool(
            "aws.dynamodb.describeTable",
            "Get detailed information about a DynamoDB table",
            {"region": _REGION, "tableName": {"type": "string", "description": "Name of the DynamoDB table"}},
            required=("tableName",),
        ),
        "describe_table",
    ),
    (
        _tool(
            "aws.cloudwatch.getMetricStatistics",
            "Get CloudWatch metrics for a resource",
            {
                "region": _REGION,
                "namespace": {"type": "string", "description": "Metric namespace (e.g., AWS/EC2)"},
                "metricName": {"type": "string", "description": "Name of the metric"},
                "dimensions": {
                    "type": "array",
                    "description": "Dimensions for the metric",
                    "items": {
                        "type": "object",
                        "properties": {"Name": {"type": "string"}, "Value": {"type": "string"}},
                    },
                },
                "startTime": {
                    "type": "string",
                    "description": "Start time for metrics (ISO format or relative time like -3h)",
                },
                "endTime": {
                    "type": "string",
                    "description": "End time for metrics (ISO format or current time by default)",
                },
                "period": {"type": "number", "description": "Period in seconds (60, 300, 3600, etc.)"},
                "statistics": {
                    **_STRING_LIST,
                    "description": "Statistics to retrieve (Average, Maximum, Minimum, SampleCount, Sum)",
                },
            },
            required=("namespace", "metricName"),
        ),
        "get_metric_statistics",
    ),
    (
        _tool(
            "aws.cloudwatch.describeAlarms",
            "List CloudWatch alarms",
            {
                "region": _REGION,
                "alarmNames": {**_STRING_LIST, "description": "Optional alarm names to filter"},
                "alarmTypes": {
                    "type": "array",
                    "description": "Optional alarm types to filter",
                    "items": {"type": "string", "enum": ["MetricAlarm", "CompositeAlarm"]},
                },
                "stateValue": {
                    "type": "string",
                    "description": "Optional state to filter by (OK, ALARM, INSUFFICIENT_DATA)",
                    "enum": ["OK", "ALARM", "INSUFFICIENT_DATA"],
                },
            },
        ),
        "describe_alarms",
    ),
    (
        _tool(
            "aws.iam.listUsers",
            "List IAM users",
            {
                "pathPrefix": {"type": "string", "description": "Optional path prefix to filter users"},
                "maxItems": _MAX_ITEMS,
            },
        ),
        "list_users",
    ),
    (
        _tool(
            "aws.iam.listRoles",
            "List IAM roles",
            {
                "pathPrefix": {"type": "string", "description": "Optional path prefix to filter roles"},
                "maxItems": _MAX_ITEMS,
            },
        ),
        "list_roles",
    ),
    (
        _tool(
            "aws.rds.describeDBInstances",
            "List RDS database instances",
            {
                "region": _REGION,
                "dbInstanceIdentifier": {"type": "string", "description": "Optional database instance identifier"},
            },
        ),
        "describe_db_instances",
    ),
    (_tool("aws.sns.listTopics", "List SNS topics", {"region": _REGION}), "list_topics"),
    (
        _tool(
            "aws.sqs.listQueues",
            "List SQS queues",
            {
                "region": _REGION,
                "queueNamePrefix": {"type": "string", "description": "Optional prefix to filter queue names"},
            },
        ),
        "list_queues",
    ),
    (
        _tool(
            "aws.cloudformation.listStacks",
            "List CloudFormation stacks",
            {"region": _REGION, "stackStatusFilter": {**_STRING_LIST, "description": "Optional status filters"}},
        ),
        "list_stacks",
    ),
    (_tool("aws.route53.listHostedZones", "List Route53 hosted zones", {"maxItems": _MAX_ITEMS}), "list_hosted_zones"),
    (
        _tool("aws.cloudfront.listDistributions", "List CloudFront distributions", {"maxItems": _MAX_ITEMS}),
        "list_distributions",
    ),
    (_tool("aws.ecs.listClusters", "List ECS clusters", {"region": _REGION}), "list_ecs_clusters"),
    (_tool("aws.eks.listClusters", "List EKS clusters", {"region": _REGION}), "list_eks_clusters"),
]
