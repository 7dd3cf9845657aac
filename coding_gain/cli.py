from __future__ import annotations

import hydra
from omegaconf import DictConfig, OmegaConf

from coding_gain.channel import default_rng
from coding_gain.code_linear import LinearBlockCode, default_code
from coding_gain.config import SimulationSettings, load_settings
from coding_gain.estimator import ErrorEstimator, sweep
from coding_gain.search import coding_gain, efficiency_table


def _estimators(settings: SimulationSettings, code: LinearBlockCode, rng):
    for name in settings.channels:
        if name == "qam":
            continue
        yield name.upper(), ErrorEstimator.for_channel(
            name,
            code=code,
            trial_count=settings.trial_count,
            rng=rng,
            batch_size=settings.batch_size,
            verbose=settings.verbose,
        )
    if "qam" in settings.channels:
        for m in settings.modulation_orders:
            yield f"QAM-{m}", ErrorEstimator.for_channel(
                "qam",
                code=code,
                modulation_order=m,
                trial_count=settings.trial_count,
                rng=rng,
                batch_size=settings.batch_size,
                verbose=settings.verbose,
            )


def run(settings: SimulationSettings, code: LinearBlockCode | None = None) -> None:
    code = default_code() if code is None else code
    rng = default_rng(settings.seed)
    search = settings.search

    print(f"Code: {code!r}, rate={code.rate:g}, d_min={code.min_distance}")
    for label, estimator in _estimators(settings, code, rng):
        for quality, error in sweep(estimator, settings.sweep.qualities()):
            print(f"[{label}] Eb/N0={quality:g}dB, \terror={error}")

    print(f"P={search.target}")
    for label, estimator in _estimators(settings, code, rng):
        if label.startswith("QAM-"):
            continue
        result = coding_gain(
            estimator,
            estimator.uncoded(),
            target=search.target,
            low=search.low,
            high=search.high,
            iterations=search.iterations,
            verbose=settings.verbose,
        ).unreached_as_nan(search.high)
        print(f"[{label}] NO DECODING: Eb/N0 = {result.uncoded}")
        print(f"[{label}]: Eb/N0 = {result.coded}, efficiency = {result.gap}")

    if "qam" in settings.channels:
        rows = efficiency_table(
            settings.modulation_orders,
            code=code,
            target=search.target,
            trial_count=settings.trial_count,
            rng=rng,
            low=search.low,
            high=search.high,
            iterations=search.iterations,
            batch_size=settings.batch_size,
            verbose=settings.verbose,
        )
        for m, threshold, gap in rows:
            print(f"[QAM-{m}]: SNR = {threshold}, efficiency = {gap}")


@hydra.main(config_path="conf", config_name="config", version_base="1.3")
def _hydra_main(cfg: DictConfig) -> None:
    print(OmegaConf.to_yaml(cfg, resolve=True))
    run(load_settings(cfg))


def main() -> None:
    _hydra_main()


if __name__ == "__main__":
    main()
