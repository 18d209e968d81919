"""
어댑터 레이어

저장소(SQLite, 인메모리)와의 연동을 담당.
Protocol 기반 인터페이스(adapters.interfaces)로 Mock 교체 가능.
"""
