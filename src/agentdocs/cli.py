"""Command-line interface for agentdocs.

Provides subcommands for listing, inspecting, linting and creating agent
documents, and for working with their memory notes.
"""

import argparse
import json
import sys
from datetime import datetime
from pathlib import Path

from .agents import AgentCatalog, AgentDefinition, MemoryScope
from .config import AgentDocsConfig, load_config
from .lint import Linter
from .lint.rules import MAX_NAME_LENGTH, NAME_PATTERN
from .logging import JSONLLogger, configure_logger
from .memory import MemoryNoteError, MemoryNotesStore


def _load_config(args: argparse.Namespace) -> AgentDocsConfig:
    """Load config from disk and apply command-line overrides."""
    config = load_config(Path(args.config) if args.config else None)
    if args.project:
        config.project_root = Path(args.project).expanduser()
    return config


def _event_logger(config: AgentDocsConfig) -> JSONLLogger | None:
    if not config.log_enabled:
        return None
    return configure_logger(config.log_dir)


def _get_catalog(config: AgentDocsConfig) -> AgentCatalog:
    """Create an AgentCatalog and discover documents."""
    catalog = AgentCatalog(config, event_logger=_event_logger(config))
    catalog.discover()
    return catalog


def _get_store(config: AgentDocsConfig) -> MemoryNotesStore:
    return MemoryNotesStore(
        memory_root=config.memory_root,
        project_root=config.project_root,
        max_lines=config.max_memory_lines,
    )


def _format_source(source: str) -> str:
    """Format source for display with color hints."""
    colors = {
        "bundled": "\033[34m",  # blue
        "user": "\033[32m",     # green
        "project": "\033[35m",  # magenta
    }
    reset = "\033[0m"
    color = colors.get(source.lower(), "")
    return f"{color}{source}{reset}"


def _memory_label(agent: AgentDefinition) -> str:
    return agent.memory.value if agent.memory else "-"


def cmd_list(args: argparse.Namespace) -> int:
    """List all discovered agents."""
    config = _load_config(args)
    catalog = _get_catalog(config)
    agents = catalog.list_agents()

    if not agents:
        print("No agents found.")
        return 0

    print(f"\n{'Name':<24} {'Source':<10} {'Model':<9} {'Memory':<8} Description")
    print("-" * 80)

    for agent in agents:
        source = _format_source(agent.source.value)
        desc = " ".join(agent.description.split())
        if len(desc) > 35:
            desc = desc[:32] + "..."
        print(
            f"{agent.name:<24} {source:<19} {agent.model or '-':<9} "
            f"{_memory_label(agent):<8} {desc}"
        )

    print(f"\nTotal: {len(agents)} agent(s)")
    if catalog.shadowed:
        print(f"Shadowed: {len(catalog.shadowed)} definition(s) overridden by name")
    if catalog.failures:
        print(f"Failed to load: {len(catalog.failures)} file(s), run 'agentdocs lint'")
    return 0


def cmd_info(args: argparse.Namespace) -> int:
    """Show detailed info about an agent."""
    config = _load_config(args)
    catalog = _get_catalog(config)

    agent = catalog.get(args.name)
    if agent is None:
        print(f"Error: Agent '{args.name}' not found.")
        return 1

    print(f"\nAgent: {agent.name}")
    print("-" * 40)
    print(f"Description: {agent.description}")
    print(f"Model: {agent.model or '(host default)'}")
    print(f"Source: {_format_source(agent.source.value)}")
    if agent.tools:
        print(f"Tools: {', '.join(agent.tools)}")
    print(f"Instruction lines: {agent.line_count}")

    if agent.path:
        print(f"Path: {agent.path}")
        dt = datetime.fromtimestamp(agent.path.stat().st_mtime)
        print(f"Last modified: {dt.strftime('%Y-%m-%d %H:%M:%S')}")

    if agent.memory is not None:
        store = _get_store(config)
        try:
            note = store.load(agent.name, agent.memory)
        except MemoryNoteError as e:
            print(f"Memory: {agent.memory.value} ({e})")
        else:
            state = f"{note.total_lines} lines" if note.path.exists() else "not created"
            print(f"Memory: {agent.memory.value} ({state})")
            print(f"Memory path: {note.path}")
            if note.topics:
                print(f"Memory topics: {', '.join(note.topics)}")
    else:
        print("Memory: none")

    return 0


def cmd_prompt(args: argparse.Namespace) -> int:
    """Print the system prompt a host would load for an agent."""
    config = _load_config(args)
    catalog = _get_catalog(config)

    try:
        prompt = catalog.build_prompt(args.name, _get_store(config))
    except KeyError:
        print(f"Error: Agent '{args.name}' not found.")
        return 1
    except MemoryNoteError as e:
        print(f"Error: {e}")
        return 1

    print(prompt)
    return 0


def _default_lint_paths(config: AgentDocsConfig) -> list[Path]:
    candidates = [config.project_agents_dir, config.user_dir]
    return [p for p in candidates if p is not None and p.is_dir()]


def cmd_lint(args: argparse.Namespace) -> int:
    """Lint agent documents."""
    config = _load_config(args)
    paths = [Path(p) for p in args.paths] or _default_lint_paths(config)
    if not paths:
        print("Error: No paths given and no agent directory found.")
        return 1

    linter = Linter(config, event_logger=_event_logger(config))
    store = _get_store(config) if args.memory else None
    report = linter.lint_paths(paths, memory_store=store)

    if args.format == "json":
        print(json.dumps(report.to_dict(), indent=2))
    else:
        for issue in report.sorted_issues():
            print(issue.format())
        print(
            f"\nChecked {report.files_checked} file(s): "
            f"{len(report.errors)} error(s), {len(report.warnings)} warning(s)"
        )

    return 0 if report.ok(strict=args.strict) else 1


AGENT_MD_TEMPLATE = '''---
name: {name}
description: {description}
model: {model}
{memory_line}---

You are {name}. Describe the role this agent plays.

## Responsibilities

1. First responsibility
2. Second responsibility

## Conventions

- Conventions the agent must follow.
{memory_section}'''

MEMORY_SECTION_TEMPLATE = '''
## Persistent memory

You have a persistent memory directory at `{memory_dir}/`. Keep
`MEMORY.md` under {max_lines} lines; it is loaded into every session. Put
detailed notes in topic files beside it and link them from `MEMORY.md`.
'''

_MEMORY_DIR_HINTS = {
    MemoryScope.USER: "~/.claude/agent-memory/{name}",
    MemoryScope.PROJECT: ".claude/agent-memory/{name}",
    MemoryScope.LOCAL: ".claude/agent-memory-local/{name}",
}


def _validate_agent_name(name: str) -> str | None:
    """Validate agent name.

    Returns error message if invalid, None if valid.
    """
    if not name:
        return "Agent name cannot be empty"

    if not NAME_PATTERN.match(name):
        return "Agent name must be lowercase kebab-case (a-z, 0-9, single hyphens)"

    if len(name) > MAX_NAME_LENGTH:
        return f"Agent name must be {MAX_NAME_LENGTH} characters or less"

    return None


def render_agent_template(
    name: str,
    description: str,
    model: str = "inherit",
    memory: MemoryScope | None = None,
    max_memory_lines: int = 200,
) -> str:
    """Render a new agent document."""
    memory_line = ""
    memory_section = ""
    if memory is not None:
        memory_line = f"memory: {memory.value}\n"
        memory_section = MEMORY_SECTION_TEMPLATE.format(
            memory_dir=_MEMORY_DIR_HINTS[memory].format(name=name),
            max_lines=max_memory_lines,
        )
    return AGENT_MD_TEMPLATE.format(
        name=name,
        description=json.dumps(description, ensure_ascii=False),
        model=json.dumps(model, ensure_ascii=False),
        memory_line=memory_line,
        memory_section=memory_section,
    )


def cmd_create(args: argparse.Namespace) -> int:
    """Create a new agent document from template."""
    name = args.name

    error = _validate_agent_name(name)
    if error:
        print(f"Error: {error}")
        return 1

    config = _load_config(args)
    if args.dir:
        target_dir = Path(args.dir).expanduser()
    else:
        target_dir = config.project_agents_dir or config.user_dir
    target = target_dir / f"{name}.md"

    if target.exists():
        print(f"Error: Agent file already exists: {target}")
        return 1

    catalog = _get_catalog(config)
    if catalog.get(name) is not None:
        print(f"Error: An agent named '{name}' already exists.")
        return 1

    memory = MemoryScope(args.memory) if args.memory else None
    description = args.description or f"Use this agent for {name.replace('-', ' ')} tasks."
    target_dir.mkdir(parents=True, exist_ok=True)
    target.write_text(
        render_agent_template(
            name,
            description,
            model=args.model,
            memory=memory,
            max_memory_lines=config.max_memory_lines,
        ),
        encoding="utf-8",
    )

    print(f"\n✓ Created agent: {name}")
    print(f"  Location: {target}")
    print("\nNext steps:")
    print(f"  1. Edit {target} to write the agent's instructions")
    print("  2. Run 'agentdocs lint' to check the document")
    return 0


def _memory_target(
    args: argparse.Namespace, config: AgentDocsConfig
) -> tuple[MemoryNotesStore, MemoryScope]:
    """Resolve store and scope: --scope wins, then the agent's declared scope."""
    if args.scope:
        return _get_store(config), MemoryScope(args.scope)

    catalog = AgentCatalog(config)
    catalog.discover()
    agent = catalog.get(args.name)
    scope = agent.memory if agent is not None and agent.memory else MemoryScope.USER
    return _get_store(config), scope


def cmd_memory(args: argparse.Namespace) -> int:
    """Inspect or edit an agent's memory notes."""
    if args.memory_command is None:
        print("Error: memory requires a subcommand (path, show, init, append, topics).")
        return 1

    config = _load_config(args)
    event_logger = _event_logger(config)

    try:
        store, scope = _memory_target(args, config)

        if args.memory_command == "path":
            print(store.index_path(args.name, scope))
            return 0

        if args.memory_command == "show":
            note = store.load(args.name, scope)
            if note.is_empty:
                print(f"No memory notes for '{args.name}' ({scope.value}).")
                return 0
            print(note.content)
            if note.truncated:
                print(
                    f"\n... {note.total_lines - store.max_lines} more line(s) "
                    f"not loaded (limit {store.max_lines})"
                )
            if note.topics:
                print(f"\nTopics: {', '.join(note.topics)}")
            return 0

        if args.memory_command == "topics":
            topics = store.list_topics(args.name, scope)
            if not topics:
                print(f"No topic files for '{args.name}'.")
            for topic in topics:
                print(topic)
            return 0

        if args.memory_command == "init":
            existed = store.exists(args.name, scope)
            path = store.init(args.name, scope)
            if existed:
                print(f"Memory already exists: {path}")
            else:
                print(f"Created memory: {path}")
                if event_logger is not None:
                    event_logger.log_memory_write(
                        args.name, scope.value, path, operation="init"
                    )
            return 0

        if args.memory_command == "append":
            text = " ".join(args.text)
            path = store.append(args.name, text, scope)
            print(f"Appended to {path}")
            if event_logger is not None:
                event_logger.log_memory_write(
                    args.name, scope.value, path, operation="append", size=len(text)
                )
            return 0
    except MemoryNoteError as e:
        print(f"Error: {e}")
        return 1

    print(f"Error: Unknown memory command '{args.memory_command}'.")
    return 1


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the agentdocs CLI."""
    parser = argparse.ArgumentParser(
        prog="agentdocs",
        description="Manage agent persona documents and their memory notes",
    )
    parser.add_argument("--config", help="Path to config.json")
    parser.add_argument(
        "--project",
        help="Project root holding .claude/agents and project memory",
    )

    subparsers = parser.add_subparsers(dest="command", help="Sub-command help")

    subparsers.add_parser("list", help="List discovered agents")

    info_parser = subparsers.add_parser("info", help="Show detailed agent info")
    info_parser.add_argument("name", help="Name of the agent")

    prompt_parser = subparsers.add_parser(
        "prompt", help="Print the system prompt for an agent"
    )
    prompt_parser.add_argument("name", help="Name of the agent")

    lint_parser = subparsers.add_parser("lint", help="Check agent documents")
    lint_parser.add_argument(
        "paths",
        nargs="*",
        help="Files or directories (default: project and user agent dirs)",
    )
    lint_parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail on warnings as well as errors",
    )
    lint_parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Output format",
    )
    lint_parser.add_argument(
        "--memory",
        action="store_true",
        help="Also check MEMORY.md length for agents that declare memory",
    )

    create_parser_ = subparsers.add_parser("create", help="Create a new agent document")
    create_parser_.add_argument("name", help="Name for the new agent (kebab-case)")
    create_parser_.add_argument("-d", "--description", help="Description of the agent")
    create_parser_.add_argument("--model", default="inherit", help="Model alias")
    create_parser_.add_argument(
        "--memory",
        choices=[s.value for s in MemoryScope],
        help="Give the agent persistent memory in this scope",
    )
    create_parser_.add_argument("--dir", help="Directory to write the document to")

    memory_parser = subparsers.add_parser("memory", help="Work with agent memory notes")
    memory_sub = memory_parser.add_subparsers(dest="memory_command")
    for command, help_text in (
        ("path", "Print the MEMORY.md path"),
        ("show", "Print the loaded MEMORY.md"),
        ("init", "Create MEMORY.md if missing"),
        ("topics", "List topic files"),
        ("append", "Append a line to MEMORY.md"),
    ):
        sub = memory_sub.add_parser(command, help=help_text)
        sub.add_argument("name", help="Name of the agent")
        sub.add_argument(
            "--scope",
            choices=[s.value for s in MemoryScope],
            help="Memory scope (default: the agent's declared scope, else user)",
        )
        if command == "append":
            sub.add_argument("text", nargs="+", help="Text to append")

    return parser


def run_cli(argv: list[str] | None = None) -> int:
    """Run the CLI with given arguments.

    Args:
        argv: Command-line arguments. Uses sys.argv[1:] if None.

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "list": cmd_list,
        "info": cmd_info,
        "prompt": cmd_prompt,
        "lint": cmd_lint,
        "create": cmd_create,
        "memory": cmd_memory,
    }

    handler = commands.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    return handler(args)


if __name__ == "__main__":
    sys.exit(run_cli())
