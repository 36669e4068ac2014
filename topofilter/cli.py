import argparse
import dataclasses
import json
import logging
import os
import sys

import networkx as nx

from . import config
from .adoption import AdoptionTable
from .driver import PopulationDensityFilter
from .exclusion import ExclusionRegionStore
from .population import PopulationStore
from .report import write_qa_map

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Prune edges of a geographic graph by population density or adoption-adjusted length"
    )
    ap.add_argument("--graph", required=True, help="Input graph (.graphml or node-link .json)")
    ap.add_argument("--out", required=True, help="Output graph path (.graphml or .json)")
    ap.add_argument(
        "--mode",
        choices=("density", "length"),
        default="density",
        help="density: population-weighted filter; length: adoption-adjusted max length",
    )
    ap.add_argument("--population", help="Populated positions table (parquet/csv: lat, lon, population, country)")
    ap.add_argument("--adoption", required=True, help="Internet adoption table (parquet/csv: country, percentage)")
    ap.add_argument(
        "--exclusion",
        nargs="?",
        const=config.DEFAULT_EXCLUSION_PATH,
        default=None,
        help=f"Enable exclusion regions from a GeoJSON file (default when given without a path: {config.DEFAULT_EXCLUSION_PATH})",
    )
    ap.add_argument("--config", default=os.environ.get("TOPOFILTER_CONFIG"), help="JSON config with lengthFilter.* keys")
    ap.add_argument("--min-length", type=float, default=os.environ.get("TOPOFILTER_MIN_LENGTH"), help="Minimum edge length (km)")
    ap.add_argument(
        "--population-threshold",
        type=float,
        default=os.environ.get("TOPOFILTER_POPULATION_THRESHOLD"),
        help="Weighted population needed to keep an edge",
    )
    ap.add_argument("--beta", type=float, default=os.environ.get("TOPOFILTER_BETA"), help="Beta-skeleton shape parameter in (0, 1)")
    ap.add_argument("--h3-res", type=int, default=config.H3_RES_POPULATION, help="H3 resolution for the population index")
    ap.add_argument("--qa-map", help="Optional Leaflet HTML map of kept/removed edges")
    ap.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, WARNING, ...).")
    return ap


def resolve_config(args: argparse.Namespace) -> config.FilterConfig:
    cfg = config.FilterConfig.from_json(args.config) if args.config else config.FilterConfig()
    overrides = {
        "min_length": args.min_length,
        "population_threshold": args.population_threshold,
        "beta": args.beta,
    }
    return dataclasses.replace(cfg, **{k: v for k, v in overrides.items() if v is not None})


def load_graph(path: str):
    if path.lower().endswith(".json"):
        with open(path, "r", encoding="utf-8") as f:
            return nx.node_link_graph(json.load(f), edges="links")
    return nx.read_graphml(path)


def save_graph(G, path: str) -> None:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    if path.lower().endswith(".json"):
        with open(path, "w", encoding="utf-8") as f:
            json.dump(nx.node_link_data(G, edges="links"), f)
    else:
        nx.write_graphml(G, path)


def run_cli(args: argparse.Namespace) -> int:
    inputs = [args.graph, args.adoption]
    if args.population:
        inputs.append(args.population)
    if args.exclusion:
        inputs.append(args.exclusion)
    for path in inputs:
        if not os.path.exists(path):
            print(f"ERROR: input not found: {path}")
            return 1
    if args.mode == "density" and not args.population:
        print("ERROR: --population is required for --mode density")
        return 1

    try:
        cfg = resolve_config(args)
        G = load_graph(args.graph)
        logger.info("Loaded graph with %d nodes and %d edges", G.number_of_nodes(), G.number_of_edges())

        exclusion = ExclusionRegionStore.from_geojson(args.exclusion) if args.exclusion else None
        adoption = AdoptionTable.from_file(args.adoption)
        population = PopulationStore.from_file(args.population, h3_res=args.h3_res) if args.population else None

        pdf = PopulationDensityFilter(G, cfg, population=population, adoption=adoption, exclusion=exclusion)
        report = pdf.filter() if args.mode == "density" else pdf.filter_by_length()

        save_graph(G, args.out)
        print(f"[ok] {args.out} ({G.number_of_edges()} edges, {report.deleted} removed)")
        if args.qa_map:
            write_qa_map(G, report.removed, args.qa_map)
            print(f"[ok] {args.qa_map}")
    except KeyboardInterrupt:
        print("\n[cli] Interrupted.")
        return 130  # 128 + SIGINT
    except Exception as e:
        logger.debug("Fatal error", exc_info=True)
        print(f"[cli] Fatal error: {e}")
        return 2

    return 0


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, str(args.log_level).upper(), logging.INFO))
    return run_cli(args)


if __name__ == "__main__":
    sys.exit(main())
