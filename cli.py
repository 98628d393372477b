"""CLI for the NBA pick engine."""
import logging

import click
from tabulate import tabulate

from backtest.optimizer import ModelOptimizer
from backtest.simulator import MODES, BacktestEngine
from betting.report import dedupe_pending, performance_report
from betting.settlement import SettlementEngine
from betting.store import PickStore
from config import BACKTEST_SEED, LOG_LEVEL, NBA_SEASON, OPTIMIZER_ITERATIONS
from database.db import get_db, init_db, reset_db
from database.models import PickStatus
from database.team_stats import TeamStatsCache
from edge.arbitrage import ArbitrageScanner
from edge.scanner import MatchupScanner
from errors import PersistenceFailure
from ingestion.games import ApiSportsClient
from ingestion.odds import OddsApiClient
from modeling.stats import refresh_team_stats
from modeling.strategies import PROFILE_MODES, TOURNAMENT_CANDIDATES, get_profile
from modeling.types import BettingLine

DATE = click.DateTime(formats=["%Y-%m-%d"])


def _pick_rows(picks):
    return [[
        p.id,
        p.match_date.strftime("%Y-%m-%d %H:%M"),
        p.profile,
        p.matchup,
        p.details,
        f"{p.odds:+d}",
        f"{p.edge:.1f}",
        p.status.value,
        f"{p.profit:+.2f}" if p.profit is not None else '-',
    ] for p in picks]


PICK_HEADERS = ['ID', 'Game Time', 'Profile', 'Matchup', 'Pick', 'Odds', 'Edge', 'Status', 'Profit']


def _load_season(season):
    client = ApiSportsClient()
    games = client.get_games(season)
    if not games:
        raise click.ClickException(f"No games found for season {season}")
    return games


@click.group()
@click.option('--log-level', default=LOG_LEVEL, help='Logging level (DEBUG, INFO, WARNING)')
def cli(log_level):
    """NBA Spread / Total / Moneyline Pick Engine"""
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


@cli.command('init')
def init_command():
    """Initialize the database."""
    init_db()
    click.echo("Database initialized.")


@cli.command('reset')
@click.confirmation_option(prompt='Are you sure you want to reset the database?')
def reset_command():
    """Reset the database (deletes all data)."""
    reset_db()
    click.echo("Database reset complete.")


@cli.group('stats')
def stats_group():
    """Team stats cache commands."""
    pass


@stats_group.command('update')
@click.option('--season', default=NBA_SEASON, help='Season to aggregate')
def stats_update(season):
    """Rebuild team stats from the season's results."""
    init_db()
    with get_db() as conn:
        count = refresh_team_stats(ApiSportsClient(), TeamStatsCache(conn), season)
    click.echo(f"Updated stats for {count} teams.")


@stats_group.command('show')
@click.option('--limit', default=30, help='Number of teams to show')
def stats_show(limit):
    """Show cached team stats, best net rating first."""
    init_db()
    with get_db() as conn:
        rows = TeamStatsCache(conn).all()[:limit]

    if not rows:
        click.echo("No team stats cached. Run 'stats update' first.")
        return

    table = [[
        i, r.team_name, r.gp, f"{r.points_per_game:.1f}", f"{r.points_allowed:.1f}",
        f"{r.efficiency:+.1f}", f"{r.recent_trend:+.1f}",
        r.last_game_date.strftime("%Y-%m-%d") if r.last_game_date else '-',
    ] for i, r in enumerate(rows, 1)]
    click.echo(tabulate(table, headers=['Rank', 'Team', 'GP', 'PPG', 'OPP', 'Net', 'Last 5', 'Last Game']))


@cli.command('scan')
@click.option('--season', default=NBA_SEASON, help='Season used for team stats')
@click.option('--dry-run', is_flag=True, help='Evaluate without saving picks')
def scan_command(season, dry_run):
    """Scan upcoming games and save picks for every profile."""
    games = ApiSportsClient()
    try:
        with PickStore.open() as store:
            scanner = MatchupScanner(games, OddsApiClient(), games, store)
            summary = scanner.run(season=season, dry_run=dry_run)
    except PersistenceFailure as e:
        raise click.ClickException(f"Scan could not save picks: {e}")

    if summary.analyses:
        table = [[
            a.matchup, f"{a.spread:+g}", f"{a.total:g}", f"{a.win_probability:.1%}",
            f"{a.edge:.1f}", a.confidence, a.recommendation,
        ] for a in summary.analyses]
        click.echo("\nMATCHUP ANALYSIS")
        click.echo(tabulate(table, headers=['Matchup', 'Model Spread', 'Model Total',
                                            'Home Win', 'Edge', 'Conf', 'Call']))

    if not summary.picks:
        click.echo("\nNo picks found.")
        return

    click.echo("\nPICKS" + (" (dry run, not saved)" if dry_run else ""))
    click.echo(tabulate([[
        p.profile, p.matchup, p.details, f"{p.odds:+d}", f"{p.edge:.1f}",
    ] for p in summary.picks], headers=['Profile', 'Matchup', 'Pick', 'Odds', 'Edge']))

    if not dry_run:
        click.echo(f"\n{summary.created} created, {summary.updated} updated, {summary.skipped} skipped.")


@cli.command('settle')
def settle_command():
    """Grade pending picks whose games have finished."""
    try:
        with PickStore.open() as store:
            summary = SettlementEngine(ApiSportsClient(), store).run()
    except PersistenceFailure as e:
        raise click.ClickException(f"Settlement could not save results: {e}")

    if summary['settled'] == 0:
        click.echo("No picks to settle.")
        return

    click.echo(f"Settled {summary['settled']} picks: "
               f"{summary['wins']}W-{summary['losses']}L-{summary['pushes']}P "
               f"({summary['pnl']:+.2f}u). {summary['pending']} still pending.")


@cli.group('picks')
def picks_group():
    """Pick ledger commands."""
    pass


@picks_group.command('pending')
@click.option('--profile', default=None, help='Only this profile')
def picks_pending(profile):
    """Show pending picks."""
    with PickStore.open() as store:
        picks = store.find_all(status=PickStatus.PENDING, profile=profile)

    if not picks:
        click.echo("No pending picks.")
        return
    click.echo(tabulate(_pick_rows(picks), headers=PICK_HEADERS))


@picks_group.command('history')
@click.option('--limit', default=20, help='Number of picks to show')
@click.option('--profile', default=None, help='Only this profile')
def picks_history(limit, profile):
    """Show recent picks of any status."""
    with PickStore.open() as store:
        picks = store.find_all(profile=profile, limit=limit)

    if not picks:
        click.echo("No pick history.")
        return
    click.echo(tabulate(_pick_rows(picks), headers=PICK_HEADERS))


@picks_group.command('report')
@click.option('--days', default=None, type=int, help='Only picks from the last N days')
def picks_report(days):
    """Show performance per profile."""
    with PickStore.open() as store:
        picks = store.find_all()

    report = performance_report(picks, days=days)
    if report.empty:
        click.echo("No picks to report on.")
        return

    table = [[
        r.profile, r.bets, f"{r.wins}-{r.losses}-{r.pushes}", r.pending,
        f"{r.win_rate:.1%}", f"{r.profit:+.2f}u", f"{r.roi:.1%}",
    ] for r in report.itertuples()]
    click.echo("\nPERFORMANCE" + (f" (last {days} days)" if days else ""))
    click.echo(tabulate(table, headers=['Profile', 'Bets', 'W-L-P', 'Pending', 'Win Rate', 'Profit', 'ROI']))


@picks_group.command('dedupe')
def picks_dedupe():
    """Remove duplicate pending picks, keeping the newest."""
    with PickStore.open() as store:
        deleted = dedupe_pending(store)
    click.echo(f"Removed {deleted} duplicate pending picks.")


@cli.command('backtest')
@click.option('--from', 'from_date', type=DATE, required=True, help='Start date (YYYY-MM-DD)')
@click.option('--days', default=7, help='Number of days to simulate')
@click.option('--mode', type=click.Choice(MODES, case_sensitive=False), default='SPREAD')
@click.option('--profile', default=None, help='Profile to test (defaults to the one trading --mode)')
@click.option('--season', default=NBA_SEASON, help='Season to replay')
@click.option('--seed', type=int, default=BACKTEST_SEED, help='Seed for synthetic market noise')
@click.option('--export', is_flag=True, help='Export results to CSV')
@click.option('--output', default='backtest_results.csv', help='Output CSV filename')
def backtest_command(from_date, days, mode, profile, season, seed, export, output):
    """Run a walk-forward backtest on synthetic lines."""
    strategy = get_profile(profile) if profile else None
    games = _load_season(season)

    click.echo(f"Running {mode.upper()} backtest from {from_date:%Y-%m-%d} for {days} days...")
    engine = BacktestEngine(seed=seed)
    result = engine.run(games, from_date.date(), days, mode, strategy)

    click.echo("\n" + "=" * 50)
    click.echo(f"BACKTEST RESULTS: {result.profile} ({result.mode})")
    click.echo("=" * 50)
    click.echo(tabulate([
        ['Period', f"{result.start_date} to {result.end_date}"],
        ['Games', result.total_games],
        ['Bets', result.bets_placed],
        ['Record', f"{result.wins}-{result.losses}-{result.pushes}"],
        ['Win Rate', f"{result.win_rate:.2%}"],
        ['Profit', f"{result.profit:+.2f}u"],
        ['ROI', f"{result.roi:.2%}"],
    ], tablefmt='plain'))

    if export:
        history_file, summary_file = engine.export_to_csv(result, output)
        click.echo(f"\nBets exported to {history_file}, summary to {summary_file}")


@cli.command('optimize')
@click.option('--from', 'from_date', type=DATE, required=True, help='Start date (YYYY-MM-DD)')
@click.option('--days', default=14, help='Number of days per evaluation')
@click.option('--mode', type=click.Choice(MODES, case_sensitive=False), default='SPREAD')
@click.option('--profile', default=None, help='Starting profile (defaults to the one trading --mode)')
@click.option('--iterations', default=OPTIMIZER_ITERATIONS, help='Number of candidates')
@click.option('--season', default=NBA_SEASON, help='Season to replay')
@click.option('--seed', type=int, default=BACKTEST_SEED, help='Seed for noise and jitter')
def optimize_command(from_date, days, mode, profile, iterations, season, seed):
    """Search for better profile weights by backtest ROI."""
    mode = mode.upper()
    if profile is None:
        profile = next(name for name, m in PROFILE_MODES.items() if m == mode)
    base = get_profile(profile)
    games = _load_season(season)

    optimizer = ModelOptimizer(BacktestEngine(seed=seed))
    run = optimizer.optimize(base, games, from_date.date(), days, mode, iterations)

    click.echo(f"\nBaseline ROI: {run.baseline.roi:.2%} over {run.baseline.bets_placed} bets")
    click.echo(f"Best ROI:     {run.best.roi:.2%} over {run.best.bets_placed} bets ({run.best.name})")
    click.echo("\nBEST WEIGHTS")
    click.echo(tabulate([
        [name, base.weights()[name], value]
        for name, value in run.best.profile.weights().items()
    ], headers=['Weight', 'Baseline', 'Best']))


@cli.command('tournament')
@click.option('--from', 'from_date', type=DATE, required=True, help='Start date (YYYY-MM-DD)')
@click.option('--days', default=14, help='Number of days to simulate')
@click.option('--mode', type=click.Choice(MODES, case_sensitive=False), default='SPREAD')
@click.option('--season', default=NBA_SEASON, help='Season to replay')
@click.option('--seed', type=int, default=BACKTEST_SEED, help='Seed for synthetic market noise')
def tournament_command(from_date, days, mode, season, seed):
    """Rank the named candidate profiles by backtest ROI."""
    games = _load_season(season)
    optimizer = ModelOptimizer(BacktestEngine(seed=seed))
    results = optimizer.run_tournament(TOURNAMENT_CANDIDATES, games, from_date.date(), days, mode.upper())

    click.echo(tabulate([
        [r.name, f"{r.win_rate:.1%}", f"{r.roi:.1%}", r.bets_placed, f"{r.wins}-{r.losses}"]
        for r in results
    ], headers=['Strategy', 'Win Rate', 'ROI', 'Bets', 'W-L']))


@cli.command('arb')
@click.option('--odds', type=int, required=True, help='Sportsbook American odds (e.g. -150)')
@click.option('--price', type=float, required=True, help='Second venue price between 0 and 1')
@click.option('--team', default='Team', help='Label for the outcome')
def arb_command(odds, price, team):
    """Compare a sportsbook price with a prediction-market price."""
    line = BettingLine(source='manual', line=0.0, odds=odds, type='moneyline_home')
    try:
        opp = ArbitrageScanner().scan(team.lower().replace(' ', '_'), team, line, price)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint='--price')

    click.echo(tabulate([
        ['Book probability', f"{opp.market_prob:.1%}"],
        ['Venue price', f"{opp.venue_price:.2f}"],
        ['Edge', f"{opp.edge_raw:+.3f}"],
        ['ROI', f"{opp.edge_percent:+.2f}%"],
        ['Signal', opp.recommendation],
        ['Confidence', f"{opp.confidence:.0f}"],
    ], tablefmt='plain'))


if __name__ == '__main__':
    cli()
