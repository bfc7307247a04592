from prometheus_client import Counter

PROGRAMS_GENERATED_TOTAL = Counter(
    "programs_generated_total",
    "Number of programs generated in program-service",
    ["template"],  # strength-primary | cardio-primary | hybrid-balance
)

PROGRAM_GENERATION_FAILURES_TOTAL = Counter(
    "program_generation_failures_total",
    "Number of program generation requests that failed in program-service",
)

PROGRAM_WORKOUTS_GENERATED_TOTAL = Counter(
    "program_workouts_generated_total",
    "Number of workouts produced across generated programs",
)

PROGRAM_UNFILLED_SLOTS_TOTAL = Counter(
    "program_unfilled_slots_total",
    "Number of exercise slots left empty because no eligible exercise was found",
    ["slot"],  # compound | isolation | accessory | power | cardio
)
