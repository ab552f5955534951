"""kubectl helpers: candidate listing and command construction."""

from __future__ import annotations

import json
import shlex

from .errors import ValidationError
from .models import Context, Namespace, Pod
from .process import ProcessRunner

KUBECTL = "kubectl"

HPA_ACTIONS = ("list", "get", "set-min", "set-max", "set-target")

_POD_COLUMNS = (
    "custom-columns=NAME:.metadata.name,READY:.status.containerStatuses[*].ready,"
    "STATUS:.status.phase,RESTARTS:.status.containerStatuses[*].restartCount,"
    "AGE:.metadata.creationTimestamp"
)
_NAMESPACE_COLUMNS = "custom-columns=NAME:.metadata.name,STATUS:.status.phase"

POD_STATUS_STYLES = {
    "running": "green",
    "pending": "yellow",
    "failed": "red",
    "error": "red",
    "succeeded": "blue",
}


def parse_contexts(output: str, current: str) -> list[Context]:
    names = [line.strip() for line in output.splitlines() if line.strip()]
    return [Context(name=name, current=name == current) for name in names]


def parse_namespaces(output: str, current: str) -> list[Namespace]:
    current = current or "default"
    namespaces: list[Namespace] = []
    for line in output.splitlines():
        parts = line.split()
        if len(parts) >= 2:
            namespaces.append(Namespace(name=parts[0], status=parts[1], current=parts[0] == current))
    return namespaces


def parse_pods(output: str) -> list[Pod]:
    pods: list[Pod] = []
    for line in output.splitlines():
        parts = line.split()
        if len(parts) >= 5:
            pods.append(Pod(name=parts[0], ready=parts[1], status=parts[2], restarts=parts[3], age=parts[4]))
    return pods


def context_label(context: Context) -> str:
    marker = "*" if context.current else " "
    return f"  {marker} {context.name}"


def context_preview(context: Context) -> str:
    return f"Context: {context.name}\nCurrent: {str(context.current).lower()}"


def namespace_label(namespace: Namespace) -> str:
    marker = "*" if namespace.current else " "
    return f"  {marker} {namespace.name} ({namespace.status})"


def namespace_preview(namespace: Namespace) -> str:
    return f"Namespace: {namespace.name}\nStatus: {namespace.status}\nCurrent: {str(namespace.current).lower()}"


def pod_label(pod: Pod) -> str:
    return f"{pod.name} ({pod.status}) - {pod.ready}"


def pod_preview(pod: Pod) -> str:
    return f"Pod: {pod.name}\nStatus: {pod.status}\nReady: {pod.ready}\nRestarts: {pod.restarts}\nAge: {pod.age}"


def pod_status_style(status: str) -> str:
    return POD_STATUS_STYLES.get(status.lower(), "white")


def use_context_argv(context: str) -> tuple[str, ...]:
    return (KUBECTL, "config", "use-context", context)


def set_namespace_argv(namespace: str) -> tuple[str, ...]:
    return (KUBECTL, "config", "set-context", "--current", f"--namespace={namespace}")


def get_argv(resource: str) -> tuple[str, ...]:
    return (KUBECTL, "get", resource)


def logs_argv(pod: str, *, follow: bool = False, tail: int = 0) -> tuple[str, ...]:
    argv = [KUBECTL, "logs", pod]
    if follow:
        argv.append("-f")
    if tail > 0:
        argv.append(f"--tail={tail}")
    return tuple(argv)


def exec_argv(pod: str, command: str = "/bin/bash") -> tuple[str, ...]:
    try:
        tokens = shlex.split(command)
    except ValueError as exc:
        raise ValidationError(f"Cannot parse command '{command}': {exc}") from exc
    if not tokens:
        raise ValidationError("A command to execute in the pod is required")
    return (KUBECTL, "exec", "-it", pod, "--", *tokens)


def _with_namespace(argv: list[str], namespace: str | None) -> tuple[str, ...]:
    if namespace:
        argv.extend(["-n", namespace])
    return tuple(argv)


def _parse_count(value: str | None, what: str) -> int:
    if value is None or value == "":
        raise ValidationError(f"{what} is required")
    try:
        count = int(value)
    except ValueError:
        raise ValidationError(f"{what} must be an integer, got '{value}'") from None
    if count < 0:
        raise ValidationError(f"{what} must not be negative, got '{value}'")
    return count


def _patch(spec: dict[str, object]) -> str:
    return json.dumps({"spec": spec}, separators=(",", ":"))


def hpa_argv(
    action: str,
    name: str | None = None,
    value: str | None = None,
    *,
    namespace: str | None = None,
) -> tuple[str, ...]:
    """Build the kubectl invocation for an autoscaler action."""

    if action not in HPA_ACTIONS:
        raise ValidationError(f"Unknown action: {action} (expected one of {', '.join(HPA_ACTIONS)})")

    if action == "list":
        return _with_namespace([KUBECTL, "get", "hpa"], namespace)

    if not name:
        raise ValidationError("HPA name is required")

    if action == "get":
        return _with_namespace([KUBECTL, "get", "hpa", name, "-o", "yaml"], namespace)

    if value is None or value == "":
        raise ValidationError("HPA name and value are required")

    if action == "set-min":
        patch = _patch({"minReplicas": _parse_count(value, "Minimum replicas")})
    elif action == "set-max":
        patch = _patch({"maxReplicas": _parse_count(value, "Maximum replicas")})
    else:
        target = _parse_count(value, "Target CPU percentage")
        patch = _patch(
            {
                "metrics": [
                    {
                        "type": "Resource",
                        "resource": {
                            "name": "cpu",
                            "target": {"type": "Utilization", "averageUtilization": target},
                        },
                    }
                ]
            }
        )

    return _with_namespace([KUBECTL, "patch", "hpa", name, "-p", patch], namespace)


def scale_argv(resource_type: str, name: str, replicas: str, *, namespace: str | None = None) -> tuple[str, ...]:
    count = _parse_count(replicas, "Replicas")
    return _with_namespace([KUBECTL, "scale", resource_type, name, f"--replicas={count}"], namespace)


class KubeClient:
    """Lists contexts, namespaces and pods through the ``kubectl`` binary."""

    def __init__(self, runner: ProcessRunner) -> None:
        self.runner = runner

    def contexts(self) -> list[Context]:
        output = self.runner.output((KUBECTL, "config", "get-contexts", "--no-headers", "-o", "name"))
        current = self.runner.output((KUBECTL, "config", "current-context")).strip()
        return parse_contexts(output, current)

    def namespaces(self) -> list[Namespace]:
        output = self.runner.output((KUBECTL, "get", "namespaces", "--no-headers", "-o", _NAMESPACE_COLUMNS))
        current = self.runner.output((KUBECTL, "config", "view", "--minify", "-o", "jsonpath={..namespace}"))
        return parse_namespaces(output, current.strip())

    def pods(self) -> list[Pod]:
        return parse_pods(self.runner.output((KUBECTL, "get", "pods", "--no-headers", "-o", _POD_COLUMNS)))
