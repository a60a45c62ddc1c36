#!/usr/bin/env python3

"""
Core data structures for the gene scoring pipeline.

Defines the chromosomal regions used for spatial lookups, the variants and
genes scored by the pipeline, the priority results attached to genes by
the phenotype prioritisers, and the pedigree describing the family under
analysis.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Set, Tuple

from .exceptions import PedigreeError

X_CHROMOSOME = 23
Y_CHROMOSOME = 24
MT_CHROMOSOME = 25

NO_CALL_ALLELES = frozenset({".", ""})


class Genotype(Enum):
    """Genotype of one individual at one variant."""
    HOMOZYGOUS_REF = "0/0"
    HETEROZYGOUS = "0/1"
    HOMOZYGOUS_ALT = "1/1"
    NOT_OBSERVED = "./."

    @classmethod
    def from_alleles(cls, alleles: Optional[Sequence[str]], alt: str) -> 'Genotype':
        """Derive a genotype from the raw allele calls of one individual."""
        if not alleles or len(alleles) < 2:
            return cls.NOT_OBSERVED
        if any(allele is None or allele in NO_CALL_ALLELES for allele in alleles):
            return cls.NOT_OBSERVED

        alt_matches = [allele == alt for allele in alleles]
        if all(alt_matches):
            return cls.HOMOZYGOUS_ALT
        if not any(alt_matches):
            return cls.HOMOZYGOUS_REF
        return cls.HETEROZYGOUS


class ModeOfInheritance(Enum):
    AUTOSOMAL_DOMINANT = "AD"
    AUTOSOMAL_RECESSIVE = "AR"
    X_RECESSIVE = "XR"
    X_DOMINANT = "XD"
    MITOCHONDRIAL = "MT"
    ANY = "ANY"


class PriorityKind(Enum):
    """The prioritisation algorithm which produced a priority result."""
    HIPHIVE = "HIPHIVE_PRIORITY"
    EXOMEWALKER = "EXOMEWALKER_PRIORITY"
    PHENIX = "PHENIX_PRIORITY"
    PHIVE = "PHIVE_PRIORITY"
    OMIM = "OMIM_PRIORITY"


class VariantEffect(Enum):
    """Sequence Ontology effect categories assigned by the upstream annotator."""
    FRAMESHIFT_VARIANT = "frameshift_variant"
    STOP_GAINED = "stop_gained"
    STOP_LOST = "stop_lost"
    START_LOST = "start_lost"
    SPLICE_ACCEPTOR_VARIANT = "splice_acceptor_variant"
    SPLICE_DONOR_VARIANT = "splice_donor_variant"
    MISSENSE_VARIANT = "missense_variant"
    INFRAME_INSERTION = "inframe_insertion"
    INFRAME_DELETION = "inframe_deletion"
    SPLICE_REGION_VARIANT = "splice_region_variant"
    SYNONYMOUS_VARIANT = "synonymous_variant"
    CODING_TRANSCRIPT_INTRON_VARIANT = "coding_transcript_intron_variant"
    NON_CODING_TRANSCRIPT_INTRON_VARIANT = "non_coding_transcript_intron_variant"
    UPSTREAM_GENE_VARIANT = "upstream_gene_variant"
    DOWNSTREAM_GENE_VARIANT = "downstream_gene_variant"
    REGULATORY_REGION_VARIANT = "regulatory_region_variant"
    INTERGENIC_VARIANT = "intergenic_variant"
    SEQUENCE_VARIANT = "sequence_variant"
    # consequence not known, e.g. one half of a split fusion transcript
    CUSTOM = "custom"


class Sex(Enum):
    MALE = "male"
    FEMALE = "female"
    UNKNOWN = "unknown"


class AffectionStatus(Enum):
    AFFECTED = "affected"
    UNAFFECTED = "unaffected"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ChromosomalRegion:
    """A 1-based, fully closed region on a numbered chromosome (23=X, 24=Y, 25=MT)."""
    chromosome: int
    start: int
    end: int

    def __post_init__(self):
        """Validate region coordinates after initialization."""
        if self.chromosome < 1:
            raise ValueError(f"Invalid chromosome: {self.chromosome}")
        if self.start > self.end:
            raise ValueError(f"Invalid region coordinates: {self.start}-{self.end}")

    @property
    def length(self) -> int:
        """Get region length."""
        return self.end - self.start + 1

    def contains_position(self, position: int) -> bool:
        """Check if region contains a specific 1-based position."""
        return self.start <= position <= self.end


@dataclass(frozen=True)
class TopologicalDomain(ChromosomalRegion):
    """A TAD together with the genes (symbol -> gene id) lying inside it."""
    genes: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        super().__post_init__()
        # read-only once loaded
        object.__setattr__(self, 'genes', MappingProxyType(dict(self.genes)))

    @property
    def gene_symbols(self) -> List[str]:
        return sorted(self.genes)


@dataclass
class TranscriptAnnotation:
    """A transcript-level consequence of a variant."""
    gene_symbol: str
    accession: str = ""
    effect: Optional[VariantEffect] = VariantEffect.SEQUENCE_VARIANT


@dataclass
class Variant:
    """
    A variant observed in the sample, already annotated and filtered.

    ``sample_genotypes`` maps each sample name to its raw allele calls, e.g.
    ``{"proband": ("A", "T")}``; ``"."`` marks a no-call allele. The gene
    attribution (``gene_symbol``, ``gene_id``, ``annotations``) can be
    rewritten by the gene reassigner.
    """
    chromosome: int
    position: int
    ref: str
    alt: str
    effect: VariantEffect = VariantEffect.SEQUENCE_VARIANT
    gene_symbol: str = "."
    gene_id: str = ""
    sample_genotypes: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    variant_score: float = 0.0
    annotations: List[TranscriptAnnotation] = field(default_factory=list)
    failed_filters: Set[str] = field(default_factory=set)

    def __post_init__(self):
        """Validate variant data after initialization."""
        if self.chromosome < 1:
            raise ValueError(f"Invalid chromosome: {self.chromosome}")
        if self.position < 1:
            raise ValueError(f"Invalid position: {self.position}")
        if not 0.0 <= self.variant_score <= 1.0:
            raise ValueError(f"Variant score must be between 0 and 1: {self.variant_score}")

    @property
    def end(self) -> int:
        """Last reference base covered by the variant."""
        return self.position + max(len(self.ref), 1) - 1

    @property
    def is_x_chromosomal(self) -> bool:
        return self.chromosome == X_CHROMOSOME

    @property
    def passed_filters(self) -> bool:
        return not self.failed_filters

    def add_failed_filter(self, filter_name: str) -> None:
        self.failed_filters.add(filter_name)

    def genotype_for(self, sample_name: str) -> Genotype:
        """Genotype of the named sample at this variant."""
        return Genotype.from_alleles(self.sample_genotypes.get(sample_name), self.alt)

    def first_genotype(self) -> Genotype:
        """
        Genotype of the first sample inserted into ``sample_genotypes``.

        The autosomal recessive filter score reads this genotype, so callers
        must insert the proband's calls first. In a multi-sample analysis
        the proband's position in the pedigree plays no part here.
        """
        for alleles in self.sample_genotypes.values():
            return Genotype.from_alleles(alleles, self.alt)
        return Genotype.NOT_OBSERVED

    def __str__(self):
        return f"{self.chromosome}:{self.position} {self.ref}>{self.alt} {self.gene_symbol} {self.effect.name}"


@dataclass
class PriorityResult:
    """Score given to a gene by one prioritisation algorithm."""
    kind: PriorityKind
    gene_symbol: str
    score: float
    gene_id: str = ""

    def __post_init__(self):
        if not 0.0 <= self.score <= 1.0:
            raise ValueError(f"Priority score must be between 0 and 1: {self.score}")


@dataclass
class Gene:
    """A gene with its variants, priority results and scores."""
    symbol: str
    gene_id: str = ""
    variants: List[Variant] = field(default_factory=list)
    priority_results: Dict[PriorityKind, PriorityResult] = field(default_factory=dict)
    inheritance_modes: Set[ModeOfInheritance] = field(default_factory=set)
    filter_score: float = 0.0
    priority_score: float = 0.0
    combined_score: float = 0.0

    def __post_init__(self):
        """Validate gene data after initialization."""
        if not self.symbol:
            raise ValueError("Gene symbol cannot be empty")

    @property
    def passed_variants(self) -> List[Variant]:
        """Variants which survived filtering."""
        return [variant for variant in self.variants if variant.passed_filters]

    @property
    def passed_filters(self) -> bool:
        return bool(self.passed_variants)

    @property
    def variant_count(self) -> int:
        return len(self.variants)

    def add_variant(self, variant: Variant) -> None:
        self.variants.append(variant)

    def add_priority_result(self, result: PriorityResult) -> None:
        """Attach a priority result, replacing any earlier one of the same kind."""
        self.priority_results[result.kind] = result

    def get_priority_result(self, kind: PriorityKind) -> Optional[PriorityResult]:
        return self.priority_results.get(kind)

    def is_compatible_with(self, mode: ModeOfInheritance) -> bool:
        return mode in self.inheritance_modes


@dataclass(frozen=True)
class Individual:
    """A member of the pedigree. Parents are referenced by name."""
    name: str
    sex: Sex = Sex.UNKNOWN
    status: AffectionStatus = AffectionStatus.UNKNOWN
    father: str = ""
    mother: str = ""

    @property
    def is_affected(self) -> bool:
        return self.status == AffectionStatus.AFFECTED


@dataclass(frozen=True)
class Pedigree:
    """
    The family under analysis.

    The order of ``individuals`` is the column order of every genotype table
    built from this pedigree.
    """
    individuals: Tuple[Individual, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'individuals', tuple(self.individuals))

        seen: Set[str] = set()
        for individual in self.individuals:
            if not individual.name:
                raise PedigreeError("Individual name cannot be empty")
            if individual.name in seen:
                raise PedigreeError("Duplicate individual in pedigree", individual.name)
            seen.add(individual.name)

        for individual in self.individuals:
            for parent in (individual.father, individual.mother):
                if parent and parent not in seen:
                    raise PedigreeError(f"Unknown parent {parent}", individual.name)

    @classmethod
    def single_sample(cls, name: str, sex: Sex = Sex.UNKNOWN) -> 'Pedigree':
        """Pedigree holding just an affected proband."""
        return cls((Individual(name=name, sex=sex, status=AffectionStatus.AFFECTED),))

    @property
    def names(self) -> List[str]:
        return [individual.name for individual in self.individuals]

    @property
    def affected(self) -> List[Individual]:
        return [individual for individual in self.individuals if individual.is_affected]

    @property
    def is_empty(self) -> bool:
        return not self.individuals

    def get_individual(self, name: str) -> Optional[Individual]:
        for individual in self.individuals:
            if individual.name == name:
                return individual
        return None

    def __len__(self):
        return len(self.individuals)
