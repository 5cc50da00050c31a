"""
配置基类和接口定义

定义了所有配置类必须继承的基类和接口规范
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Any, Optional, List, Union
import json

import yaml

from bluegreen.errors import ConfigurationError, ErrorType


class ConfigType(Enum):
    """配置类型枚举"""
    ROUTER = "router"


@dataclass
class ConfigMetadata:
    """配置元数据"""
    name: str
    config_type: ConfigType
    description: str = ""


class BaseConfig(ABC):
    """
    配置基类

    所有配置类必须继承此基类，提供：
    - 配置验证
    - 序列化/反序列化
    - 环境变量覆盖
    - 配置合并
    """

    def __init__(self, metadata: Optional[ConfigMetadata] = None):
        self._metadata = metadata or self._get_default_metadata()
        self._source_file: Optional[Path] = None
        self._env_overrides: Dict[str, Any] = {}
        self._validation_errors: List[str] = []

    @property
    def metadata(self) -> ConfigMetadata:
        """获取配置元数据"""
        return self._metadata

    @property
    def source_file(self) -> Optional[Path]:
        """获取配置源文件路径"""
        return self._source_file

    @property
    def env_overrides(self) -> Dict[str, Any]:
        """获取环境变量覆盖"""
        return self._env_overrides.copy()

    @property
    def validation_errors(self) -> List[str]:
        """获取验证错误列表"""
        return self._validation_errors.copy()

    @abstractmethod
    def _get_default_metadata(self) -> ConfigMetadata:
        """获取默认元数据"""
        pass

    @abstractmethod
    def validate(self) -> bool:
        """
        验证配置

        Returns:
            bool: 验证是否通过
        """
        pass

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        """
        转换为字典

        Returns:
            Dict[str, Any]: 配置字典
        """
        pass

    @classmethod
    @abstractmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BaseConfig':
        """
        从字典创建配置实例

        Args:
            data: 配置数据字典

        Returns:
            BaseConfig: 配置实例
        """
        pass

    def ensure_valid(self) -> 'BaseConfig':
        """验证配置，失败时抛出ConfigurationError"""
        if not self.validate():
            raise ConfigurationError(
                f"配置验证失败: {'; '.join(self._validation_errors)}",
                context={"errors": self.validation_errors}
            )
        return self

    def to_json(self, indent: int = 2) -> str:
        """转换为JSON字符串"""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    def to_yaml(self) -> str:
        """转换为YAML字符串"""
        return yaml.safe_dump(self.to_dict(), default_flow_style=False, allow_unicode=True)

    @staticmethod
    def read_file_data(file_path: Union[str, Path]) -> Dict[str, Any]:
        """
        读取配置文件内容为字典

        Args:
            file_path: 配置文件路径

        Returns:
            Dict[str, Any]: 配置数据字典
        """
        file_path = Path(file_path)

        if not file_path.exists():
            raise ConfigurationError(f"配置文件不存在: {file_path}", config_key="config_file",
                                     config_value=str(file_path),
                                     error_type=ErrorType.MISSING_CONFIG)

        with open(file_path, 'r', encoding='utf-8') as f:
            content = f.read()

        suffix = file_path.suffix.lower()
        try:
            if suffix == '.json':
                data = json.loads(content or "{}")
            elif suffix in ('.yaml', '.yml'):
                data = yaml.safe_load(content)
            else:
                raise ConfigurationError(f"不支持的配置文件格式: {file_path.suffix}",
                                         config_key="config_file", config_value=str(file_path),
                                         expected=".json, .yaml or .yml")
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigurationError(f"配置文件解析失败: {file_path}", config_key="config_file",
                                     config_value=str(file_path), cause=e) from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"配置文件顶层必须是映射: {file_path}", config_key="config_file",
                                     config_value=str(file_path), expected="mapping")
        return data

    def save_to_file(self, file_path: Union[str, Path]):
        """
        保存配置到文件

        Args:
            file_path: 目标文件路径
        """
        file_path = Path(file_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        if file_path.suffix.lower() == '.json':
            content = self.to_json()
        elif file_path.suffix.lower() in ('.yaml', '.yml'):
            content = self.to_yaml()
        else:
            raise ConfigurationError(f"不支持的配置文件格式: {file_path.suffix}",
                                     config_key="config_file", config_value=str(file_path))

        with open(file_path, 'w', encoding='utf-8') as f:
            f.write(content)

    @staticmethod
    def merge_dict(target: Dict[str, Any], source: Dict[str, Any]) -> Dict[str, Any]:
        """递归合并字典，source中的值覆盖target"""
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                BaseConfig.merge_dict(target[key], value)
            else:
                target[key] = value
        return target

    def __str__(self) -> str:
        return f"{self.__class__.__name__}({self.metadata.name})"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(metadata={self.metadata!r})"
