#!/usr/bin/env python3
"""
Basic render caching example showing template reuse and profiling.

This example demonstrates:
- Configuring a template-cached component
- Reusing one cached render across different prop values
- Reading profile data and the cache hit report
"""

import html
import sys
from pathlib import Path

# Add parent directory to path for development
sys.path.insert(0, str(Path(__file__).parent.parent))

from dazzlecache import RenderContext, RenderInterceptor


def render_greeting(identity, props):
    """Stand-in for an expensive host renderer."""
    return '<div data-reactid=".0">Hello, <span>%s</span>. <span>%s</span></div>' % (
        html.escape(props["name"]), html.escape(props["message"]))


def main():
    """Render the same component with many different props."""
    context = RenderContext()
    context.enable_caching()
    context.enable_profiling()
    context.set_caching_config({
        "components": {
            "Hello": {"strategy": "template", "enable": True, "ignoreKeys": ["sessionId"]},
        }
    })
    interceptor = RenderInterceptor(context)

    people = [("Bob", "Hi"), ("Ann", "Yo"), ("Zoë", "Welcome back"), ("Tom & Jerry", "<3")]
    for session, (name, message) in enumerate(people):
        props = {"name": name, "message": message, "sessionId": session}
        print(interceptor.render("Hello", props, render_greeting))

    print(f"\nCache entries: {context.cache_entries()}")
    for identity, keys in context.cache_hit_report().items():
        for key, hits in keys.items():
            print(f"  {identity}: {hits} hit(s) for {key}")

    print("\nProfile:")
    for identity, stats in context.profile_data.items():
        print(f"  {identity}: {stats['count']} render(s), {stats['average_ms']:.3f} ms avg")


if __name__ == "__main__":
    main()
