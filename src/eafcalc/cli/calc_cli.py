"""Command-line front end for the EAF calculator.

Examples
  python -m eafcalc.cli.calc_cli --capacity 100 --cycle 60 --days 320 \
    --intensity electricity=380 --intensity lime=40 --preset reconciled

  python -m eafcalc.cli.calc_cli --inputs configs/plant.yml --out results/plant --pdf

An inputs file is a mapping with optional ``preset``, ``parameters``,
``intensities``, ``energy``, ``factors`` and ``energy_factors`` sections;
flags given on the command line win over the file.
"""
from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from dataclasses import asdict
from pathlib import Path

from eafcalc.api import CalcInputs, coerce_parameters, run_calculation, summary_dict, write_run_log
from eafcalc.core.factors import FactorTableError, list_presets
from eafcalc.core.io import load_inputs_file
from eafcalc.core.transforms import apply_dict_overrides, parse_assignments
from eafcalc.reporting.pdf_report import ReportExportError, write_pdf_report

logger = logging.getLogger(__name__)

PARAM_FLAGS = {
    "capacity": "furnace_capacity_t",
    "cycle": "cycle_minutes",
    "days": "annual_days",
    "steel_ratio": "steel_to_metal_ratio",
    "scrap_fraction": "scrap_fraction",
}


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Estimate EAF CO₂ emissions and energy use")
    p.add_argument("--inputs", help="YAML inputs file (parameters/intensities/energy/factors)")
    p.add_argument("--preset", default=None, help="Factor preset name or YAML path")
    p.add_argument("--capacity", type=float, help="Furnace capacity (t per heat)")
    p.add_argument("--cycle", type=float, help="Heat cycle (minutes)")
    p.add_argument("--days", type=float, help="Production days per year")
    p.add_argument("--steel-ratio", type=float, help="Metallic charge per t steel (default 1.087)")
    p.add_argument("--scrap-fraction", type=float, help="Scrap share of the charge, 0..1")
    p.add_argument("--intensity", action="append", metavar="NAME=VALUE",
                   help="Per-ton material intensity (repeatable)")
    p.add_argument("--energy", action="append", metavar="NAME=VALUE",
                   help="Energy carrier quantity for the 10,000 t basis (repeatable)")
    p.add_argument("--factor", action="append", metavar="NAME=VALUE",
                   help="Override a material emission factor (repeatable)")
    p.add_argument("--top", type=int, default=5, help="Number of top emitters to list")
    p.add_argument("--out", default=None, help="Directory for emissions.csv / energy.csv / manifest.json")
    p.add_argument("--pdf", action="store_true", help="Also write report.pdf into --out")
    p.add_argument("--sweep", type=int, metavar="POINTS", default=0,
                   help="Also sweep scrap fraction over POINTS values into --out")
    p.add_argument("--log-dir", default=os.environ.get("EAFCALC_LOG_DIR"),
                   help="Write a JSON run log here (env EAFCALC_LOG_DIR)")
    p.add_argument("--list-presets", action="store_true", help="List available presets and exit")
    p.add_argument("--json", action="store_true", help="Print the summary as JSON")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return p


def inputs_from_args(args: argparse.Namespace) -> CalcInputs:
    doc = load_inputs_file(args.inputs) if args.inputs else {}

    raw_params = dict(doc.get("parameters") or {})
    for flag, name in PARAM_FLAGS.items():
        val = getattr(args, flag)
        if val is not None:
            raw_params[name] = val

    intensities = apply_dict_overrides(doc.get("intensities") or {}, parse_assignments(args.intensity))
    energy = apply_dict_overrides(doc.get("energy") or {}, parse_assignments(args.energy))
    factors = apply_dict_overrides(doc.get("factors") or {}, parse_assignments(args.factor))

    return CalcInputs(
        params=coerce_parameters(raw_params),
        intensities=intensities,
        energy_inputs=energy,
        preset=args.preset or doc.get("preset"),
        factor_overrides=factors,
        energy_factor_overrides=dict(doc.get("energy_factors") or {}),
        top_n=args.top,
    )


def print_summary(out) -> None:
    a, t, e = out.annual, out.totals, out.energy
    print("=== EAF Carbon Summary ===")
    print(f"Preset: {out.meta.get('preset')}")
    print(f"Daily heats:        {a.daily_furnace_count:.2f}")
    print(f"Daily output (t):   {a.daily_output_t:.2f}")
    print(f"Annual output (万t): {a.annual_output_10kt:.4f}")
    print(f"Total CO2 (t):      {t.total_emissions_t:,.2f}")
    print(f"CO2 per t (kg/t):   {t.per_ton_kg_co2:,.3f}")
    print(f"Total energy (tce): {e.total_energy_tce:,.3f}")
    print(f"Energy per t:       {e.per_ton_energy_tce:,.4f}")
    if out.top_items:
        print("Top emitters:")
        for item in out.top_items:
            print(f"  {item.name:20s}  {item.emission_t:,.3f} t")
    if t.per_ton_fallback:
        print("[WARN] annual output is zero; per-ton figure uses a divisor of 1")


def manifest_inputs(inputs: CalcInputs) -> dict:
    return {
        "preset": inputs.preset,
        "parameters": asdict(inputs.params),
        "intensities": inputs.intensities,
        "energy": inputs.energy_inputs,
        "factor_overrides": inputs.factor_overrides,
    }


def write_outputs(out, out_dir: Path, args, inputs: CalcInputs) -> None:
    out_dir.mkdir(parents=True, exist_ok=True)
    out.emissions.to_csv(out_dir / "emissions.csv", encoding="utf-8")
    out.energy_table.to_csv(out_dir / "energy.csv", encoding="utf-8")
    manifest = {
        "inputs_file": str(Path(args.inputs).resolve()) if args.inputs else None,
        **manifest_inputs(inputs),
        "resolved_preset": out.meta.get("preset"),
        "summary": summary_dict(out),
    }
    (out_dir / "manifest.json").write_text(json.dumps(manifest, indent=2, ensure_ascii=False), encoding="utf-8")

    if args.pdf:
        write_pdf_report(out, out_dir / "report.pdf")
    if args.sweep:
        from eafcalc.scenarios.sweep import plot_sweep, sweep_scrap_fraction
        df = sweep_scrap_fraction(inputs, points=args.sweep)
        df.to_csv(out_dir / "scrap_sweep.csv", index=False)
        plot_sweep(df, out_dir / "scrap_sweep.png")
    print(f"Wrote outputs to: {out_dir}")


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.list_presets:
        for name in list_presets():
            print(name)
        return 0

    try:
        inputs = inputs_from_args(args)
        out = run_calculation(inputs)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    except FactorTableError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(summary_dict(out), indent=2, ensure_ascii=False))
    else:
        print_summary(out)

    if args.out:
        try:
            write_outputs(out, Path(args.out), args, inputs)
        except ReportExportError as e:
            print(f"error: {e}", file=sys.stderr)
            return 1
    elif args.pdf or args.sweep:
        print("[WARN] --pdf/--sweep need --out; skipped", file=sys.stderr)

    if args.log_dir:
        path = write_run_log(args.log_dir, {"inputs": manifest_inputs(inputs), "summary": summary_dict(out)})
        logger.info("Run log written to %s", path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
