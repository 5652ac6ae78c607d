"""Prompt templates sent to the generative model."""

from __future__ import annotations

from RepoScribe.models import ArtifactKind

README_PROMPT = """\
Analyze the following repository content and write a complete README.md in \
GitHub flavored markdown.

Repository: {repo_name}

Use this outline:

1. # Project Name (taken from the repository name or package manifest)
2. ## Overview: a short, direct description of what the project does.
3. ## Setup: how to install dependencies, build and run the project locally.
4. ## Environment Configuration: a .env template with placeholder values for \
every API key or setting the code reads, if any.
5. ## Features: an ordered list of the features found in the code.
6. ## Tech Stack: languages, frameworks and libraries in use.
7. ## Usage: basic usage instructions, if applicable.
8. ## Contributing: standard contributing guidelines.
9. ## License: standard license section.

Repository Content:
{repo_content}

Be accurate: describe only what the code above actually contains."""

DOCKER_PROMPT = """\
Analyze the following repository content and write a production-ready \
Dockerfile and docker-compose.yml for its tech stack and layout.

Repository: {repo_name}

Dockerfile:
- pick a base image that matches the detected stack, multi-stage if it helps
- copy files in cache-friendly order and install dependencies efficiently
- run as a non-root user, expose the right port, set CMD or ENTRYPOINT
- add a health check where it makes sense and keep the image small

docker-compose.yml:
- the application service plus any databases or caches the code uses
- environment variables loaded from a .env file, port mappings, restart policies
- health checks, and networks or volumes only where they are needed

Look at package manifests (package.json, requirements.txt and similar) for \
dependencies and at the code for environment variables and database connections.

Reply in exactly this format:

```dockerfile
# Dockerfile content
```

```yaml
# docker-compose.yml content
```

```env
# .env.example content (only if environment variables are needed)
```

Repository Content:
{repo_content}"""

_TEMPLATES = {
    ArtifactKind.README: README_PROMPT,
    ArtifactKind.DOCKER_FILES: DOCKER_PROMPT,
}


def build_prompt(kind: ArtifactKind, document: str, repository_id: str) -> str:
    return _TEMPLATES[kind].format(repo_name=repository_id, repo_content=document)
