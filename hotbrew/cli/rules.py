"""Rule commands: mute, boost, rules."""
from __future__ import annotations

import typer

from hotbrew.store.store import Store

RULE_ICONS = {
    "mute_domain": "🔇",
    "mute_source": "🔇",
    "boost_tag": "🔊",
    "boost_domain": "🔊",
}


def mute(store: Store, domain: str) -> int:
    if not domain:
        typer.echo("Usage: hotbrew mute <domain>")
        typer.echo("\nExamples:")
        typer.echo("  hotbrew mute example.com")
        typer.echo("  hotbrew mute medium.com")
        raise typer.Exit(1)

    rule_id = store.add_rule("mute_domain", domain)
    typer.echo(f"🔇 Muted: {domain}")
    typer.echo("  Items from this domain will be excluded from future digests.")
    return rule_id


def boost(store: Store, tag: str) -> int:
    if not tag:
        typer.echo("Usage: hotbrew boost <tag>")
        typer.echo("\nExamples:")
        typer.echo("  hotbrew boost ai")
        typer.echo("  hotbrew boost golang")
        raise typer.Exit(1)

    rule_id = store.add_rule("boost_tag", tag)
    typer.echo(f"🔊 Boosted: {tag}")
    typer.echo("  Items with this tag will rank higher in future digests.")
    return rule_id


def show_rules(store: Store) -> None:
    rules = store.list_rules()
    if not rules:
        typer.echo("No rules configured.")
        typer.echo("\nUse 'hotbrew mute <domain>' or 'hotbrew boost <tag>' to add rules.")
        return

    typer.echo("☕ Active rules:\n")
    for rule in rules:
        typer.echo(f"  {RULE_ICONS.get(rule.kind, '📋')} #{rule.id} {rule.kind}: {rule.pattern}")
    typer.echo("\nDelete a rule: hotbrew rules --delete <id>")


def delete_rule(store: Store, raw_id: str) -> None:
    try:
        rule_id = int(raw_id)
    except ValueError:
        typer.echo(f"Invalid rule ID: {raw_id}", err=True)
        raise typer.Exit(1)

    if not store.delete_rule(rule_id):
        typer.echo(f"No rule #{rule_id}", err=True)
        raise typer.Exit(1)
    typer.echo(f"✓ Deleted rule #{rule_id}")
