"""
PlutusScan source references: repository URLs and commit hashes.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional
from urllib.parse import urlparse

COMMIT_PATTERN = re.compile(r'^(?:[0-9a-f]{40}|[0-9a-f]{64})$')

DECENTRALIZED_SCHEMES = ("ipfs", "ar")


class VcsType(str, Enum):
    GITHUB = "GITHUB"
    GITLAB = "GITLAB"
    CODEBERG = "CODEBERG"
    BITBUCKET = "BITBUCKET"
    SELF_HOSTED_GIT = "SELF_HOSTED_GIT"
    DECENTRALIZED = "DECENTRALIZED"


_HOST_TYPES = {
    "github.com": VcsType.GITHUB,
    "gitlab.com": VcsType.GITLAB,
    "codeberg.org": VcsType.CODEBERG,
    "bitbucket.org": VcsType.BITBUCKET,
}


@dataclass(frozen=True)
class ParsedSourceUrl:
    host: str
    protocol: str
    org_or_group: str
    repo: str
    clone_url: str
    vcs_type: VcsType

    def to_dict(self) -> Dict[str, Any]:
        return {
            "host": self.host,
            "protocol": self.protocol,
            "org_or_group": self.org_or_group,
            "repo": self.repo,
            "clone_url": self.clone_url,
            "vcs_type": self.vcs_type.value,
        }


def is_valid_commit_hash(commit: str) -> bool:
    """SHA-1 (40) or SHA-256 (64) git object id."""
    return isinstance(commit, str) and COMMIT_PATTERN.match(commit.strip().lower()) is not None


def parse_source_url(url: str) -> Optional[ParsedSourceUrl]:
    """
    Split a repository URL into host, owner and repository.

    GitLab owners may be nested groups ("group/sub"); a trailing ".git" is
    dropped. Returns None when the URL has no owner/repo path.
    """
    if not url or not isinstance(url, str):
        return None

    parsed = urlparse(url.strip())
    protocol = parsed.scheme.lower()
    host = (parsed.hostname or "").lower()

    if protocol in DECENTRALIZED_SCHEMES:
        content_id = (parsed.netloc + parsed.path).strip("/")
        if not content_id:
            return None
        return ParsedSourceUrl(
            host=protocol,
            protocol=protocol,
            org_or_group="",
            repo=content_id,
            clone_url=url.strip(),
            vcs_type=VcsType.DECENTRALIZED,
        )

    if protocol not in ("http", "https") or not host:
        return None

    segments = [s for s in parsed.path.split("/") if s]
    if len(segments) < 2:
        return None

    vcs_type = _HOST_TYPES.get(host, VcsType.SELF_HOSTED_GIT)
    if vcs_type == VcsType.GITLAB:
        owner_segments, repo = segments[:-1], segments[-1]
    else:
        owner_segments, repo = segments[:1], segments[1]

    if repo.endswith(".git"):
        repo = repo[:-4]
    if not repo:
        return None

    org = "/".join(owner_segments)
    return ParsedSourceUrl(
        host=host,
        protocol=protocol,
        org_or_group=org,
        repo=repo,
        clone_url=f"https://{host}/{org}/{repo}.git",
        vcs_type=vcs_type,
    )
