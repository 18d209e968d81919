"""
API 라우트 패키지

각 기능별 라우터 모듈:
- health: 헬스 체크
- ledger: 분개 전기/조회, 잔액 동기화, 시산표
- postings: 업무 문서(비용, 차입, 송장, 입금, 반품, 작업지시) 전기
- accounts: 계정과목 관리
"""
