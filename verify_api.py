import json
import sys

from app.client import ApiError, BlogClient, format_error_message
from app.core.config import settings

def print_result(name, result):
    print(f"--- {name} ---")
    print(json.dumps(result, indent=2, default=str))
    print("\n")

def run_verification():
    client = BlogClient(settings.API_URL)

    # 1. Login
    print("1. Logging in...")
    if not settings.SEED_ADMIN_EMAIL or not settings.SEED_ADMIN_PASSWORD:
        print("SEED_ADMIN_EMAIL and SEED_ADMIN_PASSWORD must be set.")
        sys.exit(1)
    try:
        session = client.login(settings.SEED_ADMIN_EMAIL, settings.SEED_ADMIN_PASSWORD)
    except ApiError as e:
        print(f"Login failed: {format_error_message(e)}")
        sys.exit(1)
    print_result("Login", session["administrator"])

    # 2. Create a draft
    print("2. Creating draft post...")
    post = client.create_post({
        "title": "Verification Post",
        "content": "<p>Created by the API verification script.</p>",
        "categories": ["newsroom"],
    })
    print_result("Create", post)

    # 3. Publish it and read it back by slug
    print("3. Publishing...")
    client.update_post(post["id"], {"is_published": True})
    print_result("By slug", client.get_post_by_slug(post["slug"]))
    print_result("Views", client.increment_view_count(post["slug"]))

    # 4. Statistics
    print("4. Statistics...")
    print_result("Statistics", client.get_statistics())

    # 5. Clean up
    print("5. Deleting post...")
    client.delete_post(post["id"])
    print("Verification finished.")

if __name__ == "__main__":
    run_verification()
