"""Static danger classification for proposed shell commands.

Every rule is local and pure: the verdict depends only on the command text.
Matching is broad, so some harmless commands also ask for confirmation.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass

# Command names and name+flag combinations that must not run unconfirmed.
DANGEROUS_COMMANDS: tuple[str, ...] = (
    # deletion
    "rm",
    "rmdir",
    "unlink",
    "shred",
    # system control
    "shutdown",
    "reboot",
    "poweroff",
    "halt",
    "init",
    "systemctl stop",
    "systemctl disable",
    # disk and filesystem
    "mkfs",
    "fdisk",
    "parted",
    "dd",
    "format",
    "mkswap",
    "wipefs",
    # package removal
    "apt-get remove",
    "apt remove",
    "apt-get purge",
    "apt purge",
    "yum remove",
    "dnf remove",
    "pacman -r",
    # permission and ownership
    "chmod 777",
    "chmod -r",
    "chown -r",
    "chgrp -r",
    # network
    "iptables -f",
    "ufw disable",
    # process control
    "kill -9",
    "kill -kill",
    "killall",
    "pkill",
    # user management
    "userdel",
    "deluser",
    "passwd",
    # privilege escalation
    "sudo",
    "su ",
    "doas",
)

# Where a command name counts as "at command position": line or group start,
# after a pipe or separator, inside a substitution, after a wrapper such as
# sudo or xargs, or as the program run by find -exec.
_COMMAND_POSITION = (
    r"(?:^|[\n|;&`({]\s*"
    r"|\b(?:sudo|doas|nohup|env|then|do|else)\s+"
    r"|\bxargs\s+(?:-\S+\s+)*"
    r"|-exec(?:dir)?\s+)"
)

# Fragments that are dangerous wherever they appear.
DANGEROUS_PATTERNS: tuple[tuple[str, str], ...] = (
    ("redirect into a device or absolute path", r">\s*/(?!dev/(?:null|stdout|stderr|tty)\b)"),
    ("tee into an absolute path", r"\|\s*(?:sudo\s+)?tee\s+(?:-a\s+)?/"),
    ("pipe into rm or dd", r"\|\s*(?:rm|dd)"),
    ("pipe into an interpreter", r"\|\s*(?:sudo\s+)?(?:(?:ba|z|k|da|fi)?sh|python[0-9.]*|perl|ruby)\b"),
    ("fork bomb", r":\s*\(\s*\)\s*\{"),
    ("recursive deletion of root, home or cwd", r"-[a-z]*(?:rf|fr)[a-z]*\s+(?:/|~|\.|\*)"),
    ("recursive removal", r"\brm\s+(?:-\S+\s+)*(?:-[a-z]*r|--recursive)"),
    ("move of the filesystem root", r"\bmv\s+/\*?\s"),
    ("permission stripping", r"\bchmod\s+(?:-[a-z]+\s+)*0+\b"),
    ("recursive ownership change", r"\bchown\s+-r"),
    ("filesystem creation", r"\bmkfs\b"),
    ("raw disk copy", r"\bdd\s+if="),
    ("read from a raw device stream", r"/dev/(?:zero|u?random)"),
    ("redirect from /dev/null", r"/dev/null\s*>"),
)

SUDO_MUTATING_VERBS: tuple[str, ...] = ("rm", "dd", "mkfs", "chmod", "chown", "mv", "cp")


@dataclass(frozen=True)
class DangerRule:
    """One compiled rule and the label shown when it fires."""

    label: str
    regex: re.Pattern[str]


def _compile_rules() -> tuple[DangerRule, ...]:
    rules = [
        DangerRule(f"dangerous command '{name.strip()}'", re.compile(_COMMAND_POSITION + re.escape(name)))
        for name in DANGEROUS_COMMANDS
    ]
    rules.extend(DangerRule(label, re.compile(pattern)) for label, pattern in DANGEROUS_PATTERNS)
    return tuple(rules)


RULES = _compile_rules()


def _normalize(command: str) -> str:
    return command.strip().lower()


def _iter_reasons(command: str) -> Iterator[str]:
    lowered = _normalize(command)
    if not lowered:
        return
    for rule in RULES:
        if rule.regex.search(lowered):
            yield rule.label
    if "sudo" in lowered:
        for verb in SUDO_MUTATING_VERBS:
            if verb in lowered:
                yield f"sudo with '{verb}'"


def danger_reasons(command: str) -> list[str]:
    """List every rule ``command`` trips, in rule order."""
    return list(dict.fromkeys(_iter_reasons(command)))


def is_dangerous(command: str) -> bool:
    return next(_iter_reasons(command), None) is not None
