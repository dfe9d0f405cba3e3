"""
Recommendation engine: turns stored analyses and chat transcripts into a
ranked, summarized set of farm-business recommendations.

Modules
-------
payload      : defensive accessors for opaque analysis payloads.
selection    : recent_analysis_slice() + recent_of_type(): recency truncation.
business     : extract_business_recommendations(): feasibility rules.
forecast     : extract_forecast_recommendations(): trend/seasonality/accuracy.
optimization : extract_optimization_recommendations(): allocation/bottlenecks.
chat         : extract_chat_insights(): keyword buckets over assistant replies.
seasonal     : seasonal_recommendations(): static per-season advice.
ranker       : merge_candidates() + rank_candidates(): two-pass ordering.
summary      : build_summary(): narrative text.
engine       : generate(): the pure facade tying it all together.

Nothing in this package performs I/O.
"""
