"""
Regional storytelling for Brazilian state (UF) breakdowns of an indicator:
ranking, per-region averages, highlights and a short narrative.
"""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Optional, Sequence

from app.utils.descriptive import mean
from app.utils.formatting import format_value_with_unit

# IBGE state codes
UF_REGIONS = {
    11: "Norte", 12: "Norte", 13: "Norte", 14: "Norte", 15: "Norte", 16: "Norte", 17: "Norte",
    21: "Nordeste", 22: "Nordeste", 23: "Nordeste", 24: "Nordeste", 25: "Nordeste",
    26: "Nordeste", 27: "Nordeste", 28: "Nordeste", 29: "Nordeste",
    31: "Sudeste", 32: "Sudeste", 33: "Sudeste", 35: "Sudeste",
    41: "Sul", 42: "Sul", 43: "Sul",
    50: "Centro-Oeste", 51: "Centro-Oeste", 52: "Centro-Oeste", 53: "Centro-Oeste",
}

UF_NAMES = {
    11: "Rondônia", 12: "Acre", 13: "Amazonas", 14: "Roraima", 15: "Pará",
    16: "Amapá", 17: "Tocantins", 21: "Maranhão", 22: "Piauí", 23: "Ceará",
    24: "Rio Grande do Norte", 25: "Paraíba", 26: "Pernambuco", 27: "Alagoas",
    28: "Sergipe", 29: "Bahia", 31: "Minas Gerais", 32: "Espírito Santo",
    33: "Rio de Janeiro", 35: "São Paulo", 41: "Paraná", 42: "Santa Catarina",
    43: "Rio Grande do Sul", 50: "Mato Grosso do Sul", 51: "Mato Grosso",
    52: "Goiás", 53: "Distrito Federal",
}

UF_SIGLAS = {
    11: "RO", 12: "AC", 13: "AM", 14: "RR", 15: "PA", 16: "AP", 17: "TO",
    21: "MA", 22: "PI", 23: "CE", 24: "RN", 25: "PB", 26: "PE", 27: "AL",
    28: "SE", 29: "BA", 31: "MG", 32: "ES", 33: "RJ", 35: "SP",
    41: "PR", 42: "SC", 43: "RS", 50: "MS", 51: "MT", 52: "GO", 53: "DF",
}


@dataclass
class RegionalStoryData:
    uf_code: int
    uf_sigla: str
    uf_name: str
    region: str
    value: float
    trend: str              # up | down | stable
    percent_change: float


@dataclass
class RegionComparison:
    region: str
    avg_value: float
    count: int


@dataclass
class RegionalNarrative:
    title: str
    story: str
    highlights: list = field(default_factory=list)
    ranking: list = field(default_factory=list)
    region_comparison: list = field(default_factory=list)


def get_region_by_uf_code(uf_code: int) -> str:
    return UF_REGIONS.get(uf_code, "Outros")


def get_uf_name_by_code(uf_code: int) -> str:
    return UF_NAMES.get(uf_code, f"UF {uf_code}")


def get_uf_sigla_by_code(uf_code: int) -> str:
    return UF_SIGLAS.get(uf_code, str(uf_code))


def compare_regions(data: Sequence[RegionalStoryData]) -> list[RegionComparison]:
    groups: dict[str, list[float]] = defaultdict(list)
    for d in data:
        groups[d.region].append(d.value)
    out = [RegionComparison(region=r, avg_value=sum(v) / len(v), count=len(v)) for r, v in groups.items()]
    return sorted(out, key=lambda c: c.avg_value, reverse=True)


def generate_regional_narrative(
    data: Sequence[RegionalStoryData],
    indicator_name: str,
    unit: Optional[str],
) -> RegionalNarrative:
    if not data:
        return RegionalNarrative(
            title="Regional data not available",
            story="There is not enough data to build a regional analysis.",
        )

    ranking = sorted(data, key=lambda d: d.value, reverse=True)
    regions = compare_regions(data)
    best, worst = ranking[0], ranking[-1]
    avg_value = mean([d.value for d in data])

    def fmt(v: float) -> str:
        return format_value_with_unit(v, unit)

    highlights = [f"🏆 {best.uf_name} ({best.uf_sigla}) leads with {fmt(best.value)}"]
    if regions:
        highlights.append(f"📍 {regions[0].region} has the highest regional average")

    growth_leader = max(data, key=lambda d: d.percent_change)
    if growth_leader.percent_change > 0:
        highlights.append(
            f"📈 {growth_leader.uf_name} shows the largest growth: +{growth_leader.percent_change:.1f}%"
        )

    declining = [d for d in data if d.trend == "down"]
    if declining:
        highlights.append(f"⚠️ {len(declining)} state(s) trending down")

    parts = [
        f"The **{indicator_name}** indicator shows marked regional differences across Brazil. "
        f"{best.uf_name} has the highest value ({fmt(best.value)}), while {worst.uf_name} "
        f"has the lowest ({fmt(worst.value)}). The national average is {fmt(avg_value)}."
    ]
    if len(regions) > 1:
        parts.append(
            f"Among regions, {regions[0].region} leads with an average of {fmt(regions[0].avg_value)}, "
            f"followed by {regions[1].region}."
        )
    if len(declining) > 3:
        parts.append(
            f"The {len(declining)} states trending down deserve a closer look."
        )
    elif declining:
        parts.append(f"{', '.join(d.uf_sigla for d in declining)} are trending down.")
    else:
        parts.append("Most states are stable or growing.")

    return RegionalNarrative(
        title=f"Regional overview: {indicator_name}",
        story="\n\n".join(parts),
        highlights=highlights,
        ranking=ranking,
        region_comparison=regions,
    )
