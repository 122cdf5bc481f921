"""Input validation for CLI arguments."""
import re
import sys

NAME_PATTERN = r'^[a-zA-Z0-9_-]+$'


def validate_profile_name(name: str) -> None:
    """
    Validate a credential profile name.

    Profile names are YAML keys under 'credentials' and may only contain [a-zA-Z0-9_-].

    Args:
        name: Profile name to validate

    Raises:
        SystemExit with code 2 if validation fails
    """
    if not name:
        print("Error: Profile name cannot be empty", file=sys.stderr)
        print("\nProfile names must match: [a-zA-Z0-9_-]", file=sys.stderr)
        sys.exit(2)

    if not re.match(NAME_PATTERN, name):
        print(f"Error: Invalid profile name '{name}'", file=sys.stderr)
        print("\nAllowed characters: letters, numbers, underscores (_), hyphens (-)", file=sys.stderr)
        print("\nExamples of valid names:", file=sys.stderr)
        print("  ✓ default", file=sys.stderr)
        print("  ✓ ci-deploy", file=sys.stderr)
        print("  ✓ STAGING_2", file=sys.stderr)
        sys.exit(2)


def validate_project_id(project_id: str) -> None:
    """
    Validate a GCP project ID.

    GCP project IDs are 6-30 characters: lowercase letters, digits and hyphens,
    starting with a letter and not ending with a hyphen.

    Raises:
        SystemExit with code 2 if validation fails
    """
    if not re.match(r'^[a-z][a-z0-9-]{4,28}[a-z0-9]$', project_id):
        print(f"Error: Invalid GCP project ID '{project_id}'", file=sys.stderr)
        print("\nProject IDs are 6-30 lowercase letters, digits or hyphens, starting with a letter", file=sys.stderr)
        sys.exit(2)
