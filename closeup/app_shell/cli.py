import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any

import yaml

from closeup.adapters.dev_posts import DevPostSink
from closeup.adapters.local_media import create_local_media_store
from closeup.components import editor as editor_component
from closeup.components.compose import ComposeSession, PostDraft, PostType
from closeup.components.document import DocumentError, MediaReference
from closeup.components.editor import (
    DeleteBackwardInput,
    EditInput,
    Editor,
    InsertImageInput,
    NewlineInput,
    SelectInput,
    ToggleInput,
    TypeTextInput,
)
from closeup.components.formatting import Toggle
from closeup.components.richtext import (
    SerializeConfig,
    outline,
    parse_html,
    serialize_document,
)
from closeup.rules.loader import load_rules_or_default
from closeup.rules.models import Rules

logger = logging.getLogger("cli")


class ScriptError(ValueError):
    """Raised when an edit script cannot be replayed."""


# --- Edit scripts ---


def load_script(path: Path) -> list[Any]:
    """Read the `steps` list of an edit script."""
    if not path.exists():
        raise ScriptError(f"Script {path} not found.")
    with open(path) as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ScriptError(f"Invalid YAML in script {path}: {e}") from e

    steps = data.get("steps") if isinstance(data, dict) else data
    if not isinstance(steps, list):
        raise ScriptError("Script must be a list of steps or a mapping with a 'steps' list.")
    return steps


def step_to_input(step: Any, index: int) -> EditInput:
    """
    Translate one script step to an editor input.

    Bare strings are `newline` and `backspace`; every other step is a
    single-key mapping such as `{type: "Hello"}` or `{select: [0, 5]}`.
    """
    if step == "newline":
        return NewlineInput()
    if step == "backspace":
        return DeleteBackwardInput()
    if not isinstance(step, dict) or len(step) != 1:
        raise ScriptError(f"Step {index}: expected a single-key mapping, got {step!r}")

    ((name, value),) = step.items()
    if name == "type":
        return TypeTextInput(text=str(value))
    if name == "toggle":
        try:
            return ToggleInput(toggle=Toggle(value))
        except ValueError as e:
            raise ScriptError(f"Step {index}: unknown toggle {value!r}") from e
    if name == "image":
        return InsertImageInput(ref=MediaReference(handle=f"step-{index}", url=str(value)))
    if name == "image_file":
        # Unresolved; the handle doubles as the source path
        return InsertImageInput(ref=MediaReference(handle=str(value)))
    if name == "select":
        if isinstance(value, list):
            if len(value) != 2:
                raise ScriptError(f"Step {index}: select takes [start, end]")
            return SelectInput(start=int(value[0]), end=int(value[1]))
        return SelectInput(start=int(value))
    raise ScriptError(f"Step {index}: unknown step {name!r}")


def replay(editor: Editor, steps: list[Any]) -> None:
    for index, step in enumerate(steps):
        editor_component.run(editor, step_to_input(step, index))


class FileImageSource:
    """ImageSource reading a picked image from disk."""

    def __init__(self, path: Path) -> None:
        self.path = path

    async def load(self) -> bytes | None:
        if not self.path.exists():
            logger.warning(f"Image file {self.path} not found.")
            return None
        return await asyncio.to_thread(self.path.read_bytes)


async def compose_post(
    session: ComposeSession, steps: list[Any], draft: PostDraft
) -> bool:
    for index, step in enumerate(steps):
        if isinstance(step, dict) and set(step) == {"image_file"}:
            tasks = session.add_images([FileImageSource(Path(step["image_file"]))])
            await asyncio.gather(*tasks)
            continue
        editor_component.run(session.editor, step_to_input(step, index))

    result = await session.submit(draft)
    for error in result.errors:
        logger.error(error.message)
    return result.success


# --- Handlers ---


def handle_render(rules: Rules, args: argparse.Namespace) -> None:
    editor = Editor(rules.editor)
    replay(editor, load_script(Path(args.script)))

    body = serialize_document(editor.document, SerializeConfig.from_rules(rules))
    print(body.html)
    for url in body.media_urls:
        print(f"media: {url}")


def handle_parse(rules: Rules, args: argparse.Namespace) -> None:
    path = Path(args.file)
    if not path.exists():
        logger.error(f"File {path} not found.")
        sys.exit(1)

    config = SerializeConfig.from_rules(rules)
    document = parse_html(path.read_text(), config)
    for entry in outline(document, config.bullet_marker):
        print(f"{entry.kind}: {entry.text}")


def handle_post(rules: Rules, args: argparse.Namespace) -> None:
    session = ComposeSession(
        owner_id=args.owner,
        uploader=create_local_media_store(args.media_dir, args.media_url, rules=rules.media),
        submitter=DevPostSink(),
        rules=rules,
    )
    draft = PostDraft(
        post_type=PostType(args.post_type),
        title=args.title,
        audience=args.audience or rules.posts.default_audience,
        parent_reference=args.parent,
    )
    if not asyncio.run(compose_post(session, load_script(Path(args.script)), draft)):
        sys.exit(1)
    print("Post submitted.")


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(level=logging.INFO)

    parser = argparse.ArgumentParser(description="Closeup compose CLI")
    parser.add_argument("--rules", help="Path to rules.yaml (default: $CLOSEUP_RULES_PATH)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # render
    render_parser = subparsers.add_parser("render", help="Replay an edit script and print HTML")
    render_parser.add_argument("script", help="YAML edit script")

    # parse
    parse_parser = subparsers.add_parser("parse", help="Print the outline of an HTML body")
    parse_parser.add_argument("file", help="HTML body file")

    # post
    post_parser = subparsers.add_parser("post", help="Compose and submit a post (dev sink)")
    post_parser.add_argument("script", help="YAML edit script")
    post_parser.add_argument("--owner", required=True, help="Owner id used for uploads")
    post_parser.add_argument(
        "--type",
        dest="post_type",
        default=PostType.THOUGHTS.value,
        choices=[t.value for t in PostType],
    )
    post_parser.add_argument("--title", default="")
    post_parser.add_argument("--audience", help="Audience (default from rules)")
    post_parser.add_argument("--parent", help="Thread or prompt reference")
    post_parser.add_argument("--media-dir", help="Where uploaded images are stored")
    post_parser.add_argument("--media-url", help="Public URL prefix of the media dir")

    args = parser.parse_args(argv)

    try:
        rules = load_rules_or_default(args.rules)
    except (FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        sys.exit(1)

    try:
        if args.command == "render":
            handle_render(rules, args)
        elif args.command == "parse":
            handle_parse(rules, args)
        elif args.command == "post":
            handle_post(rules, args)
    except (ScriptError, DocumentError) as e:
        logger.error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
