"""RigBudget：预算约束下的整机配置生成"""
