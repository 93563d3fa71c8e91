"""
Sandbox script for browsing a running Foodly backend.

This script exercises the client end to end: it restores (or creates) a session,
lists recipes, runs a search, opens a recipe and toggles its bookmark twice.

Prerequisites:
- A Foodly backend reachable at FOODLY_API_URL (default: http://localhost:8000)
- Optional: FOODLY_USERNAME and FOODLY_PASSWORD in .env to log in

Run:
    python -m sandbox.sandbox_browse
"""

import os

from foodly.browser import RecipeBrowser
from foodly.config import configure_logging
from foodly.errors import FoodlyError


def run():
    """Browse recipes, search and toggle a bookmark."""
    configure_logging()
    browser = RecipeBrowser()
    try:
        print("=" * 80)
        print(f"Foodly backend: {browser.client.base_url}")
        print("=" * 80)

        session = browser.start()
        username = os.getenv("FOODLY_USERNAME")
        password = os.getenv("FOODLY_PASSWORD")
        if not session.is_logged_in and username and password:
            browser.login(username, password)
        print(f"Logged in: {browser.session.is_logged_in}")

        print(f"\n=== All recipes ({len(browser.recipes)}) ===")
        for recipe in browser.recipes:
            print(f"{recipe.id:4d} | {recipe.title} | bookmarked={recipe.bookmarked}")

        query = "pizza"
        browser.search(query)
        print(f"\n=== Search '{query}' ({len(browser.recipes)}) ===")
        if not browser.query.is_current:
            print("(showing previous results, the search request failed)")
        for recipe in browser.recipes:
            print(f"{recipe.id:4d} | {recipe.title}")

        if not browser.recipes:
            print("\nNo recipes to open.")
            return

        recipe = browser.open_recipe(browser.recipes[0].id)
        print(f"\nOpened: {recipe.title} ({len(recipe.ingredients)} ingredients)")

        if browser.session.is_logged_in:
            first = browser.toggle_bookmark(recipe.id)
            second = browser.toggle_bookmark(recipe.id)
            print(f"Bookmark toggled: {first} -> {second}")
    except FoodlyError as e:
        print(f"\n❌ Error: {e}")
    finally:
        browser.close()


if __name__ == "__main__":
    run()
