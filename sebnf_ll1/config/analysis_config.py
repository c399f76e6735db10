"""
分析配置模块
控制 BNF 展开与冲突报告的行为
"""


class AnalysisConfig:
    """分析配置（全局单例）"""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return
        self._initialized = True
        # 展开语法糖时生成的辅助非终结符前缀
        self.helper_prefix = '___'
        # 默认每处语法糖生成独立的辅助规则
        self.share_helper_rules = False
        # 为冲突计算示例字符串
        self.witness_examples = True

    def enable_helper_sharing(self):
        """结构相同的语法糖共用同一条辅助规则"""
        self.share_helper_rules = True

    def disable_helper_sharing(self):
        """每处语法糖生成独立的辅助规则"""
        self.share_helper_rules = False

    def is_helper_sharing(self) -> bool:
        return self.share_helper_rules

    def enable_witness_examples(self):
        self.witness_examples = True

    def disable_witness_examples(self):
        """冲突中只记录重叠的语言，不计算示例字符串"""
        self.witness_examples = False

    def wants_witness_examples(self) -> bool:
        return self.witness_examples

    def reset(self):
        """恢复默认配置"""
        self.helper_prefix = '___'
        self.share_helper_rules = False
        self.witness_examples = True


# 全局配置实例
analysis_config = AnalysisConfig()
