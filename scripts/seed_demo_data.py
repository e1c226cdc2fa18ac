#!/usr/bin/env python3
"""
VR SHOW — Demo Seed.

Creates one immersive-experience project with competing provider bids,
selects the cheapest bid per role and saves a snapshot, so every tab of the
dashboard (bids, comparison, quote, planning, archive) has data.

Usage:
    python scripts/seed_demo_data.py            # seed on top of existing data
    python scripts/seed_demo_data.py --reset    # drop + recreate tables first
"""

import argparse
import logging
import sys

sys.path.insert(0, ".")

from vrshow import create_app
from vrshow.models import db
from vrshow.services import archive_service, project_service, quote_service

logger = logging.getLogger("seed_demo_data")

DEMO_PROJECT = {
    "name": "Musée Immersif — Parcours VR",
    "brief": (
        "Parcours VR de 12 minutes pour un musée d'histoire naturelle. "
        "Casques autonomes, 3 scènes, voix off en français et en anglais."
    ),
    "project_type": "UnityVR",
    "required_roles": [
        "Chef de projet / Direction de production",
        "Scénariste immersif",
        "Modeleur 3D",
        "Intégrateur Unity",
        "Sound designer",
        "QA / Test VR",
    ],
    "invited_team": [
        {"email": "studio@polygones.fr", "code": "4821"},
        {"email": "contact@sonique.fr", "code": "1937"},
    ],
    "global_margin": 40,
}

# (email, identity, [(role, unit_cost, days)])
DEMO_PROPOSALS = [
    (
        "studio@polygones.fr",
        {"first_name": "Léa", "last_name": "Martin", "company_name": "Polygones"},
        [
            ("Chef de projet / Direction de production", 550, 10),
            ("Modeleur 3D", 400, 15),
            ("Intégrateur Unity", 500, 12),
        ],
    ),
    (
        "hello@pixelforge.fr",
        {"first_name": "Karim", "last_name": "Benali", "company_name": "PixelForge"},
        [
            ("Modeleur 3D", 350, 18),
            ("Intégrateur Unity", 480, 14),
            ("QA / Test VR", 300, 5),
        ],
    ),
    (
        "contact@sonique.fr",
        {"first_name": "Inès", "last_name": "Roux", "company_name": "Sonique"},
        [
            ("Scénariste immersif", 450, 6),
            ("Sound designer", 420, 8),
        ],
    ),
]


def seed(reset: bool = False):
    if reset:
        db.drop_all()
        db.create_all()
        logger.info("Tables recreated")

    project = project_service.create_project(DEMO_PROJECT)
    for email, identity, lines in DEMO_PROPOSALS:
        project_service.submit_proposal(
            project,
            {"role": "provider", "email": email},
            {**identity, "lines": [{"role": r, "unit_cost": c, "days": d} for r, c, d in lines]},
        )

    for group in project_service.compare_bids(project):
        best = next(b for b in group["bids"] if b["is_best_price"] or group["count"] == 1)
        quote_service.select_bid(project, int(best["id"]))

    snapshot = archive_service.save_snapshot(project)
    view = quote_service.quote_view(project)
    logger.info(
        "Seeded project=%s lines=%d revenue=%.0f margin=%.1f%% snapshot=%s",
        project.id, len(view["lines"]), view["stats"]["total_revenue"],
        view["stats"]["average_margin"], snapshot.id,
    )
    return project


def main():
    parser = argparse.ArgumentParser(description="Seed VR SHOW demo data")
    parser.add_argument("--reset", action="store_true", help="drop and recreate all tables first")
    args = parser.parse_args()

    app = create_app()
    with app.app_context():
        seed(reset=args.reset)


if __name__ == "__main__":
    main()
