"""
Simple version bumper for PlanTables
Run this before tagging a release to increment the version
"""
import re
import sys
from pathlib import Path

VERSION_FILE = Path(__file__).resolve().parent / 'version_info.py'

TUPLE_RE = r'VERSION = \((\d+), (\d+), (\d+), (\d+)\)'
STRING_RE = r'VERSION_STRING = "(\d+)\.(\d+)\.(\d+)"'


def bump_version(path=VERSION_FILE, part='patch'):
    """
    Increment one part of the version (e.g., patch: 1.0.2 -> 1.0.3).

    Bumping minor or major resets the parts after it.

    Returns:
        str: New version string, or None if the file has no version information
    """
    path = Path(path)
    content = path.read_text()

    version_match = re.search(TUPLE_RE, content)
    if not version_match or not re.search(STRING_RE, content):
        print("Error: Could not find version information")
        return None

    major, minor, patch, build = map(int, version_match.groups())
    if part == 'major':
        major, minor, patch = major + 1, 0, 0
    elif part == 'minor':
        minor, patch = minor + 1, 0
    elif part == 'patch':
        patch += 1
    else:
        raise ValueError(f"Unknown version part: {part}")

    content = re.sub(TUPLE_RE, f"VERSION = ({major}, {minor}, {patch}, {build})", content)
    new_string = f"{major}.{minor}.{patch}"
    content = re.sub(STRING_RE, f'VERSION_STRING = "{new_string}"', content)
    path.write_text(content)

    print(f"Version bumped to {new_string}")
    return new_string


if __name__ == '__main__':
    bump_version(part=sys.argv[1] if len(sys.argv) > 1 else 'patch')
