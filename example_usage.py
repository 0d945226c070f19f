"""
Example usage of the Raster Script Composer

This script demonstrates how to use the API programmatically
"""

import requests
import json
from pathlib import Path


API_URL = "http://localhost:8000"

EXAMPLE_SCRIPT = """\
# A title card with a framed banner
template="1920x1080", bg=#1E1E2E
poly="5% 70%  95% 70%  95% 90%  5% 90%", fill=darkslateblue, border=gold, thickness=5
text="{$title}", y=45%, fontsize=8%, color=white, maxwidth=90%
text="{$subtitle}", fontsize=4%, color=lightgray
"""


def render_inline_example():
    """
    Example: Render an inline script via API
    """
    # Check if API is running
    try:
        response = requests.get(f"{API_URL}/health")
        print(f"✓ API Status: {response.json()['status']}")
    except requests.exceptions.ConnectionError:
        print("✗ Error: API is not running. Please start with: python main.py")
        return

    print("\nRendering inline script...")

    payload = {
        "script": EXAMPLE_SCRIPT,
        "variables": {
            "title": "Quarterly Report",
            "subtitle": "Q3 - all numbers preliminary",
        },
    }

    response = requests.post(f"{API_URL}/render", json=payload)

    if response.status_code == 200:
        output = Path("title_card.jpg")
        output.write_bytes(response.content)
        print(f"\n✓ Success!")
        print(f"  Saved: {output} ({len(response.content)} bytes)")
    else:
        print(f"\n✗ Error: {response.status_code}")
        print(json.dumps(response.json(), indent=2))


def render_file_example(script_name: str = "card.txt"):
    """
    Example: Render a script stored in workspace/scripts/ with query variables
    """
    response = requests.get(
        f"{API_URL}/render",
        params={"file": script_name, "title": "Hello from a query string"},
    )

    if response.status_code == 200:
        print(f"\n✓ Rendered {script_name}: {response.headers['content-type']}, {len(response.content)} bytes")
    else:
        print(f"\n✗ Error: {response.status_code}")
        print(response.text)


def direct_interpreter_example():
    """
    Example: Use the interpreter directly (without API)
    """
    from modules import render_script

    print("\nRunning interpreter directly...")

    result = render_script(
        EXAMPLE_SCRIPT + 'output="workspace/out/title_card.png"\n',
        variables={"title": "Direct Render", "subtitle": "No server needed"},
        base_dir=Path.cwd(),
    )

    print(f"\n✓ Success!")
    print(f"  Commands: {result.commands_executed}")
    print(f"  Output: {result.output_path}")


if __name__ == "__main__":
    import sys

    print("=" * 60)
    print("Raster Script Composer - Example Usage")
    print("=" * 60)

    if len(sys.argv) > 1 and sys.argv[1] == "direct":
        # Direct interpreter usage
        direct_interpreter_example()
    else:
        # API usage
        print("\nMake sure you have:")
        print("1. A font in assets/fonts/ (default: GoNotoCurrent.ttf)")
        print("2. Started the API server: python main.py")
        print("\nPress Enter to continue...")
        input()

        render_inline_example()
        render_file_example()

    print("\n" + "=" * 60)
