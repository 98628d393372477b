"""Per-profile performance and duplicate-pick cleanup."""
import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional

import pandas as pd

from database.models import Pick, PickStatus

logger = logging.getLogger(__name__)

REPORT_COLUMNS = ["profile", "bets", "wins", "losses", "pushes", "pending", "profit", "win_rate", "roi"]


def picks_to_frame(picks: List[Pick]) -> pd.DataFrame:
    return pd.DataFrame([{
        "id": p.id,
        "profile": p.profile,
        "match_date": p.match_date,
        "matchup": p.matchup,
        "pick_type": p.pick_type.value,
        "details": p.details,
        "odds": p.odds,
        "edge": p.edge,
        "status": p.status.value,
        "profit": p.profit,
        "created_at": p.created_at,
    } for p in picks])


def performance_report(picks: List[Pick], days: Optional[int] = None,
                       now: Optional[datetime] = None) -> pd.DataFrame:
    """
    Wins, losses, profit, win rate and ROI per profile.

    Win rate ignores pushes; ROI is profit per graded unit staked.
    ``days`` limits the report to picks whose game fell in the trailing window.
    """
    df = picks_to_frame(picks)
    if df.empty:
        return pd.DataFrame(columns=REPORT_COLUMNS)

    if days is not None:
        now = now or datetime.now(timezone.utc)
        cutoff = now - timedelta(days=days)
        df = df[df["match_date"] >= cutoff]
        if df.empty:
            return pd.DataFrame(columns=REPORT_COLUMNS)

    df = df.assign(
        win=(df["status"] == PickStatus.WIN.value).astype(int),
        loss=(df["status"] == PickStatus.LOSS.value).astype(int),
        push=(df["status"] == PickStatus.PUSH.value).astype(int),
        open=(df["status"] == PickStatus.PENDING.value).astype(int),
        profit=df["profit"].fillna(0.0),
    )

    report = df.groupby("profile").agg(
        wins=("win", "sum"),
        losses=("loss", "sum"),
        pushes=("push", "sum"),
        pending=("open", "sum"),
        profit=("profit", "sum"),
    ).reset_index()

    report["bets"] = report["wins"] + report["losses"] + report["pushes"]
    decided = report["wins"] + report["losses"]
    report["win_rate"] = (report["wins"] / decided.where(decided > 0)).fillna(0.0)
    report["roi"] = (report["profit"] / report["bets"].where(report["bets"] > 0)).fillna(0.0)
    report["profit"] = report["profit"].round(2)

    return report[REPORT_COLUMNS].sort_values("profit", ascending=False).reset_index(drop=True)


def find_duplicate_pending(picks: List[Pick]) -> List[int]:
    """
    IDs of PENDING picks that repeat a (profile, matchup, match date) key.

    The newest pick in each group is kept.
    """
    df = picks_to_frame([p for p in picks if p.status is PickStatus.PENDING])
    if df.empty:
        return []

    df = df.sort_values(["created_at", "id"], ascending=False)
    dupes = df[df.duplicated(subset=["profile", "matchup", "match_date"], keep="first")]
    return [int(i) for i in dupes["id"]]


def dedupe_pending(store) -> int:
    """Delete duplicate PENDING picks. Returns number of rows removed."""
    ids = find_duplicate_pending(store.find_all(status=PickStatus.PENDING))
    if not ids:
        logger.info("No duplicate pending picks.")
        return 0

    deleted = store.delete(ids)
    logger.info("Removed %d duplicate pending picks.", deleted)
    return deleted
