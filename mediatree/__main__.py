"""
mediatree: browse a flat image store as a directory tree
"""

import argparse
import asyncio
import inspect
import logging
import os
import secrets
import sys
from enum import Enum
from pathlib import Path
from typing import Annotated, Any

import uvicorn
from pydantic import TypeAdapter, ValidationError
from pydantic.fields import FieldInfo
from uvicorn.config import LOGGING_CONFIG

from mediatree.config import ENV_PREFIX, AuthOptions, RefreshPolicy, StorageBackend, get_settings, validate_settings
from mediatree.connections import media_connections
from mediatree.display import format_file_size, format_upload_date, render_tree
from mediatree.errors import UpstreamFailure
from mediatree.namespace import build_tree, find_node, resolve
from mediatree.objectstorage.images import fetch_listing


def run(args):
    settings = get_settings()
    logging.info(
        f"Starting server at port {args.port}, debug={not args.nodebug}, auth={settings.auth.value}, "
        f"store={settings.storage_backend.value}, refresh={settings.refresh_policy.value}"
    )
    if warning := validate_settings():
        logging.warning(warning)
    logging.info(
        "To change server config, create an .env file and/or set environment parameters,\n"
        f"{' ' * 26}see mediatree/config.py for more information.\n"
        f"{' ' * 26}You can also run `python -m mediatree config` to create the .env settings file interactively\n"
    )
    log_config = "logging.yml" if Path("logging.yml").exists() else LOGGING_CONFIG
    uvicorn.run("mediatree.api:app", host="0.0.0.0", reload=not args.nodebug, port=int(args.port), log_config=log_config)


async def _load_tree():
    async with media_connections():
        listing = await fetch_listing()
    skipped: list[str] = []
    tree = build_tree(listing, skipped=skipped)
    if skipped:
        logging.warning(f"Skipped {len(skipped)} listing entries with unusable ids")
    return tree


async def print_tree(args) -> None:
    try:
        tree = await _load_tree()
    except UpstreamFailure as e:
        logging.error(f"Could not fetch the image listing: {e.message}")
        sys.exit(1)
    node = find_node(tree, args.path)
    if node is None:
        logging.error(f"Directory not found: {args.path}")
        sys.exit(1)
    print(render_tree(node, show_objects=not args.dirs_only))


async def list_directory(args) -> None:
    try:
        tree = await _load_tree()
    except UpstreamFailure as e:
        logging.error(f"Could not fetch the image listing: {e.message}")
        sys.exit(1)
    listing = resolve(tree, args.path)
    if listing is None:
        logging.error(f"Directory not found: {args.path}")
        sys.exit(1)
    for d in listing.directories:
        print(f"{d.name + '/':40} {d.directory_count:>5} folders {d.object_count:>6} images")
    for obj in listing.objects:
        print(f"{obj.filename:40} {format_file_size(obj.size_bytes):>10} {format_upload_date(obj.uploaded_at)}")


def base_env():
    return dict(
        mediatree_auth=AuthOptions.api_key.value,
        mediatree_api_key=secrets.token_hex(nbytes=32),
    )


def create_env(args):
    if os.path.exists(".env"):
        print("*** File .env already exists, quitting ***")
        sys.exit(1)

    env = base_env()
    if args.account_id:
        env["mediatree_cf_account_id"] = args.account_id
    with open(".env", "w") as f:
        for key, val in env.items():
            f.write(f"{key}={val}\n")
    os.chmod(".env", 0o600)
    print("*** Created .env file ***")


VALIDATORS = {
    "auth": AuthOptions.validate,
    "storage_backend": StorageBackend.validate,
    "refresh_policy": RefreshPolicy.validate,
}


def config_mediatree(args):
    settings = get_settings()
    # Not a useful entry in an actual env_file
    print(f"Reading/writing settings from {settings.env_file}")
    for fieldname, fieldinfo in type(settings).model_fields.items():
        if fieldname == "env_file":
            continue

        value = getattr(settings, fieldname)
        value = menu(fieldname, fieldinfo, value, validation_function=VALIDATORS.get(fieldname))
        if value is ABORTED:
            return
        if value is not UNCHANGED:
            setattr(settings, fieldname, value)

    with settings.env_file.open("w") as f:
        for fieldname, fieldinfo in type(settings).model_fields.items():
            if fieldname == "env_file":
                continue
            value = getattr(settings, fieldname)
            if isinstance(value, Enum):
                value = value.value
            if doc := fieldinfo.description:
                f.write(f"# {doc}\n")
            if _isenum(fieldinfo) and fieldinfo.annotation:
                f.write("# Valid options:\n")
                for option in fieldinfo.annotation:
                    doc = (option.__doc__ or "").replace("\n", " ")
                    f.write(f"# - {option.name}: {doc}\n")
            if value is None:
                f.write(f"#{ENV_PREFIX}{fieldname}=\n\n")
            else:
                f.write(f"{ENV_PREFIX}{fieldname}={value}\n\n")
    os.chmod(settings.env_file, 0o600)
    print(f"*** Written {bold('.env')} file to {settings.env_file} ***")


def bold(x):
    return "\033[1m" + str(x) + "\033[0m"


ABORTED = object()
UNCHANGED = object()


def _isenum(fieldinfo: FieldInfo) -> bool:
    try:
        return issubclass(fieldinfo.annotation, Enum) if fieldinfo.annotation is not None else False
    except TypeError:
        return False


def menu(fieldname: str, fieldinfo: FieldInfo, value, validation_function=None):
    print(f"\n{bold(fieldname)}: {fieldinfo.description}")
    if _isenum(fieldinfo) and fieldinfo.annotation:
        print("  Possible choices:")
        options: Any = fieldinfo.annotation
        for option in options:
            print(f"  - {option.name}: {option.__doc__}")
        print()
    print(f"The current value for {bold(fieldname)} is {bold(value)}.")
    while True:
        try:
            value = input("Enter a new value, press [enter] to leave unchanged, or press [control+c] to abort: ")
        except KeyboardInterrupt:
            return ABORTED
        if not value.strip():
            return UNCHANGED
        if validation_function and (message := validation_function(value)):
            print(f"\nInvalid value: {message}")
            continue
        try:
            return _coerce(fieldinfo, value)
        except ValidationError as e:
            print(f"\nInvalid value: {e.errors()[0]['msg']}")


def _coerce(fieldinfo: FieldInfo, value: str):
    """Convert the typed-in text to the field's type, checking its constraints (e.g. the cf_page_size range)"""
    annotation: Any = fieldinfo.annotation
    if fieldinfo.metadata:
        annotation = Annotated[(annotation, *fieldinfo.metadata)]
    return TypeAdapter(annotation).validate_python(value)


def main():
    parser = argparse.ArgumentParser(description=__doc__, prog="python -m mediatree")

    subparsers = parser.add_subparsers(dest="action", title="action", help="Action to perform:", required=True)
    p = subparsers.add_parser("run", help="Run the backend API in development mode")
    p.add_argument(
        "--no-debug",
        action="store_true",
        dest="nodebug",
        help="Disable debug mode (useful for testing downstream clients)",
    )
    p.add_argument("-p", "--port", help="Port", default=5000)
    p.set_defaults(func=run)

    p = subparsers.add_parser("create-env", help="Create the .env file with a random API key")
    p.add_argument("-a", "--account-id", dest="account_id", help="The Cloudflare account id.")
    p.set_defaults(func=create_env)

    p = subparsers.add_parser("config", help="Configure mediatree settings in an interactive menu.")
    p.set_defaults(func=config_mediatree)

    p = subparsers.add_parser("tree", help="Print the directory tree derived from the image store")
    p.add_argument("path", nargs="?", default="", help="Only print the tree below this directory")
    p.add_argument("-d", "--dirs-only", action="store_true", dest="dirs_only", help="Do not list images")
    p.set_defaults(func=print_tree)

    p = subparsers.add_parser("ls", help="List the subdirectories and images of one directory")
    p.add_argument("path", nargs="?", default="", help="The directory to list (default: root)")
    p.set_defaults(func=list_directory)

    args = parser.parse_args()

    logging.basicConfig(format="[%(levelname)-7s:%(name)-15s] %(message)s", level=logging.INFO)
    for noisy in ("httpx", "botocore", "aiobotocore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    if inspect.iscoroutinefunction(args.func):
        asyncio.run(args.func(args))
    else:
        args.func(args)


if __name__ == "__main__":
    main()
