"""Project scaffolding from built-in and user templates."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from string import Template

from .errors import NotFoundError, PersistenceError, ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TemplateFile:
    """A file rendered into the output directory."""

    path: str
    content: str
    mode: int = 0o644


@dataclass(frozen=True, slots=True)
class ProjectTemplate:
    """A named set of files to scaffold."""

    name: str
    description: str
    files: tuple[TemplateFile, ...]


GITHUB_ACTIONS = """\
name: CI/CD Pipeline

on:
  push:
    branches: [ main, develop ]
  pull_request:
    branches: [ main ]

jobs:
  test:
    runs-on: ubuntu-latest
    steps:
    - uses: actions/checkout@v4

    - name: Set up Python
      uses: actions/setup-python@v5
      with:
        python-version: '3.12'

    - name: Install dependencies
      run: pip install -e .[test]

    - name: Run tests
      run: pytest

  build:
    needs: test
    runs-on: ubuntu-latest
    if: github.ref == 'refs/heads/main'

    steps:
    - uses: actions/checkout@v4

    - name: Build image
      run: docker build -t ${service_name}:latest .
"""

K8S_DEPLOYMENT = """\
apiVersion: apps/v1
kind: Deployment
metadata:
  name: ${service_name}
  labels:
    app: ${service_name}
spec:
  replicas: 2
  selector:
    matchLabels:
      app: ${service_name}
  template:
    metadata:
      labels:
        app: ${service_name}
    spec:
      containers:
      - name: ${service_name}
        image: ${service_name}:latest
        ports:
        - containerPort: 8080
          name: http
        env:
        - name: ENVIRONMENT
          value: "development"
        - name: LOG_LEVEL
          value: "info"
        resources:
          requests:
            memory: "64Mi"
            cpu: "250m"
          limits:
            memory: "128Mi"
            cpu: "500m"
        livenessProbe:
          httpGet:
            path: /health
            port: http
          initialDelaySeconds: 30
          periodSeconds: 10
        readinessProbe:
          httpGet:
            path: /health
            port: http
          initialDelaySeconds: 5
          periodSeconds: 5
"""

K8S_SERVICE = """\
apiVersion: v1
kind: Service
metadata:
  name: ${service_name}-service
  labels:
    app: ${service_name}
spec:
  type: ClusterIP
  ports:
  - port: 80
    targetPort: 8080
    protocol: TCP
    name: http
  selector:
    app: ${service_name}
"""

K8S_POD = """\
apiVersion: v1
kind: Pod
metadata:
  name: ${service_name}-pod
  labels:
    app: ${service_name}
spec:
  containers:
  - name: ${service_name}
    image: ${service_name}:latest
    ports:
    - containerPort: 8080
      name: http
    env:
    - name: ENVIRONMENT
      value: "development"
    - name: LOG_LEVEL
      value: "info"
    resources:
      requests:
        memory: "64Mi"
        cpu: "250m"
      limits:
        memory: "128Mi"
        cpu: "500m"
"""

K8S_CONFIGMAP = """\
apiVersion: v1
kind: ConfigMap
metadata:
  name: ${service_name}-config
data:
  config.yaml: |
    port: 8080
    env: development

    database:
      host: localhost
      port: 5432
      name: ${service_name}

    logging:
      level: info
      format: json

    features:
      debug: true
      metrics: true
"""

DOCKERFILE = """\
# Multi-stage build for ${service_name}

# Build stage
FROM python:3.12-slim AS builder

WORKDIR /app
COPY pyproject.toml ./
COPY src ./src
RUN pip wheel --no-cache-dir --wheel-dir /wheels .

# Final stage
FROM python:3.12-slim

# Create non-root user
RUN groupadd -g 1001 appgroup && useradd -u 1001 -g appgroup -M appuser

WORKDIR /app
COPY --from=builder /wheels /wheels
RUN pip install --no-cache-dir /wheels/* && rm -rf /wheels

USER appuser

EXPOSE 8080

HEALTHCHECK --interval=30s --timeout=3s --start-period=5s --retries=3 \\
  CMD python -c "import urllib.request; urllib.request.urlopen('http://localhost:8080/health')" || exit 1

CMD ["${module_name}"]
"""

BUILTIN_TEMPLATES: tuple[ProjectTemplate, ...] = (
    ProjectTemplate(
        "github-actions",
        "GitHub Actions workflow template",
        (TemplateFile(".github/workflows/ci.yml", GITHUB_ACTIONS),),
    ),
    ProjectTemplate("k8s-deployment", "Kubernetes Deployment manifest", (TemplateFile("deployment.yaml", K8S_DEPLOYMENT),)),
    ProjectTemplate("k8s-service", "Kubernetes Service manifest", (TemplateFile("service.yaml", K8S_SERVICE),)),
    ProjectTemplate("k8s-pod", "Kubernetes Pod manifest", (TemplateFile("pod.yaml", K8S_POD),)),
    ProjectTemplate("k8s-configmap", "Kubernetes ConfigMap manifest", (TemplateFile("configmap.yaml", K8S_CONFIGMAP),)),
    ProjectTemplate("dockerfile", "Multi-stage Dockerfile template", (TemplateFile("Dockerfile", DOCKERFILE),)),
)


def _discover_user_templates(template_dir: Path) -> list[ProjectTemplate]:
    """Treat each sub-directory of ``template_dir`` as a template."""

    if not template_dir.is_dir():
        return []

    discovered: list[ProjectTemplate] = []
    for directory in sorted(child for child in template_dir.iterdir() if child.is_dir()):
        files: list[TemplateFile] = []
        for source in sorted(path for path in directory.rglob("*") if path.is_file()):
            try:
                content = source.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("Skipping template file '%s': %s", source, exc)
                continue
            mode = source.stat().st_mode & 0o777
            files.append(TemplateFile(source.relative_to(directory).as_posix(), content, mode))
        discovered.append(ProjectTemplate(directory.name, f"Custom template from {directory}", tuple(files)))
    return discovered


def available_templates(template_dir: str | Path | None = None) -> list[ProjectTemplate]:
    """Return the built-in templates followed by user templates not shadowing them."""

    templates = list(BUILTIN_TEMPLATES)
    if template_dir:
        builtin_names = {template.name for template in BUILTIN_TEMPLATES}
        for template in _discover_user_templates(Path(template_dir).expanduser()):
            if template.name in builtin_names:
                logger.warning("User template '%s' shadows a built-in template and is ignored", template.name)
                continue
            templates.append(template)
    return templates


def find_template(name: str, template_dir: str | Path | None = None) -> ProjectTemplate:
    for template in available_templates(template_dir):
        if template.name == name:
            return template
    raise NotFoundError(f"Template '{name}' not found")


def template_variables(project_name: str) -> dict[str, str]:
    return {
        "project_name": project_name,
        "service_name": project_name,
        "module_name": re.sub(r"[^0-9a-z_]", "", project_name.lower().replace("-", "_")),
    }


def output_directory(project_name: str | None, output: str | Path | None) -> Path:
    if output:
        return Path(output)
    if project_name:
        return Path(project_name)
    return Path(".")


def render_template(
    template: ProjectTemplate,
    *,
    project_name: str | None = None,
    output: str | Path | None = None,
    force: bool = False,
) -> list[Path]:
    """Write ``template``'s files and return the paths created."""

    destination = output_directory(project_name, output)
    name = project_name or destination.resolve().name
    if not name:
        raise ValidationError("A project name is required to render templates")
    variables = template_variables(name)

    targets = [(destination / file.path, file) for file in template.files]
    if not force:
        existing = [str(path) for path, _ in targets if path.exists()]
        if existing:
            raise ValidationError(f"File {existing[0]} already exists (use --force to overwrite)")

    written: list[Path] = []
    try:
        for path, file in targets:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(Template(file.content).safe_substitute(variables), encoding="utf-8")
            os.chmod(path, file.mode)
            written.append(path)
    except OSError as exc:
        raise PersistenceError(f"Failed to write template '{template.name}': {exc}") from exc

    return written
