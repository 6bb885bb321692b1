"""Parsing of the post-receive hook contract (``oldrev newrev refname`` on stdin)."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

from pushdeploy.errors import TriggerError

DEFAULT_FORCED_BRANCH = "master"
BRANCH_REF_PREFIX = "refs/heads/"
_OBJECT_ID = re.compile(r"^(?:[0-9a-f]{40}|[0-9a-f]{64})$")


@dataclass(frozen=True, slots=True)
class UpdateRecord:
    old_rev: str
    new_rev: str
    ref_name: str

    @property
    def is_deletion(self) -> bool:
        return set(self.new_rev) == {"0"}


def parse_update_records(lines: Iterable[str]) -> list[UpdateRecord]:
    records: list[UpdateRecord] = []
    for number, raw_line in enumerate(lines, start=1):
        line = raw_line.strip()
        if not line:
            continue
        parts = line.split()
        if len(parts) != 3:
            raise TriggerError(f"malformed update record on line {number}: {line!r}")
        old_rev, new_rev, ref_name = parts
        if not (_OBJECT_ID.match(old_rev) and _OBJECT_ID.match(new_rev)):
            raise TriggerError(
                f"malformed update record on line {number}: bad object id in {line!r}"
            )
        if not ref_name.startswith("refs/"):
            raise TriggerError(
                f"malformed update record on line {number}: bad ref name {ref_name!r}"
            )
        records.append(UpdateRecord(old_rev=old_rev, new_rev=new_rev, ref_name=ref_name))
    return records


def branch_from_ref(ref_name: str) -> str | None:
    if not ref_name.startswith(BRANCH_REF_PREFIX):
        return None
    branch = ref_name[len(BRANCH_REF_PREFIX):]
    return branch or None


def select_branches(records: Iterable[UpdateRecord], target_branch: str) -> list[str]:
    """Return the branch of every record that should trigger a deployment, in push order."""
    target = target_branch.strip()
    selected: list[str] = []
    for record in records:
        branch = branch_from_ref(record.ref_name)
        if branch is None or record.is_deletion:
            continue
        if target and record.ref_name != f"{BRANCH_REF_PREFIX}{target}":
            continue
        selected.append(branch)
    return selected
